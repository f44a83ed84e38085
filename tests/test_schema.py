import pytest

from tierconf.core.errors import FailureKind, SchemaDefinitionError, Tier
from tierconf.core.schema import Schema, ValueType, Var, boolean, define, enum, number, string, url


def test_define_returns_entries_in_tier_order():
    schema = define(
        server={"DATABASE_URL": url()},
        shared={"LOG_LEVEL": string(default="info")},
        client={"PUBLIC_API_URL": url()},
    )

    assert isinstance(schema, Schema)
    assert schema.keys() == ("DATABASE_URL", "LOG_LEVEL", "PUBLIC_API_URL")
    assert schema.keys(Tier.SERVER) == ("DATABASE_URL",)
    assert schema.tier_of("PUBLIC_API_URL") is Tier.CLIENT
    assert "LOG_LEVEL" in schema
    assert "OTHER" not in schema


def test_defaults_are_coerced_at_definition_time():
    schema = define(shared={
        "PORT": number(default="8080"),
        "RATIO": number(default=0.5),
        "DEBUG": boolean(default=False),
        "MODE": enum("a", "b", default="b"),
    })

    assert schema.entry("PORT").default == 8080
    assert schema.entry("RATIO").default == 0.5
    assert schema.entry("DEBUG").default is False
    assert schema.entry("MODE").default == "b"


def test_required_follows_default_unless_explicit():
    assert string().is_required
    assert not string(default="x").is_required
    assert not string(required=False).is_required
    assert string(default="x", required=True).is_required


def test_client_key_without_prefix_is_rejected():
    with pytest.raises(SchemaDefinitionError) as exc_info:
        define(client={"API_URL": url()})

    (failure,) = exc_info.value.failures
    assert failure.key == "API_URL"
    assert failure.tier is Tier.CLIENT
    assert failure.kind is FailureKind.NAMING


def test_server_key_with_client_prefix_is_rejected():
    with pytest.raises(SchemaDefinitionError) as exc_info:
        define(server={"PUBLIC_SECRET": string()})

    assert exc_info.value.failures[0].kind is FailureKind.NAMING


def test_shared_key_may_use_either_name():
    schema = define(shared={"PUBLIC_FLAG": boolean(default=True), "REGION": string(default="eu")})
    assert len(schema) == 2


def test_custom_client_prefix():
    schema = define(client={"NEXT_PUBLIC_SITE": string(default="x")}, client_prefix="NEXT_PUBLIC_")
    assert schema.client_prefix == "NEXT_PUBLIC_"

    with pytest.raises(SchemaDefinitionError):
        define(client={"PUBLIC_SITE": string(default="x")}, client_prefix="NEXT_PUBLIC_")


def test_empty_client_prefix_is_rejected():
    with pytest.raises(SchemaDefinitionError):
        define(shared={"A": string()}, client_prefix="")


def test_key_declared_in_two_tiers_is_rejected():
    with pytest.raises(SchemaDefinitionError) as exc_info:
        define(server={"LOG_LEVEL": string()}, shared={"LOG_LEVEL": string(default="info")})

    (failure,) = exc_info.value.failures
    assert failure.kind is FailureKind.DUPLICATE
    assert failure.tier is Tier.SHARED
    assert "server-only" in failure.detail


def test_all_definition_problems_reported_together():
    with pytest.raises(SchemaDefinitionError) as exc_info:
        define(
            server={"PUBLIC_TOKEN": string(), "PORT": number(default="abc")},
            shared={"PORT": number()},
            client={"API_KEY": string()},
        )

    kinds = [f.kind for f in exc_info.value.failures]
    assert kinds == [FailureKind.NAMING, FailureKind.DEFAULT, FailureKind.DUPLICATE, FailureKind.NAMING]
    assert exc_info.value.keys == ("PUBLIC_TOKEN", "PORT", "PORT", "API_KEY")


@pytest.mark.parametrize(
    "descriptor",
    [
        "number",
        Var(ValueType.ENUM),
        string(pattern="("),
        number(minimum=10, maximum=1),
    ],
)
def test_bad_descriptors_are_rejected(descriptor):
    with pytest.raises(SchemaDefinitionError) as exc_info:
        define(shared={"KEY": descriptor})

    assert exc_info.value.failures[0].kind is FailureKind.DESCRIPTOR


@pytest.mark.parametrize(
    "descriptor",
    [
        number(default=True),
        boolean(default=1),
        enum("a", "b", default="c"),
        url(default="localhost"),
        number(default=5, minimum=10),
    ],
)
def test_invalid_defaults_are_rejected(descriptor):
    with pytest.raises(SchemaDefinitionError) as exc_info:
        define(shared={"KEY": descriptor})

    assert exc_info.value.failures[0].kind is FailureKind.DEFAULT


def test_define_does_not_read_environment(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    schema = define(server={"DATABASE_URL": url()})
    assert schema.entry("DATABASE_URL").default is None


def test_plain_tag_names_are_normalised():
    schema = define(shared={"PORT": Var("number")})
    assert schema.entry("PORT").var.type is ValueType.NUMBER


def test_unknown_tag_is_rejected():
    with pytest.raises(SchemaDefinitionError) as exc_info:
        define(shared={"PORT": Var("decimal")})

    assert exc_info.value.failures[0].kind is FailureKind.DESCRIPTOR


def test_bad_client_prefix_reported_with_other_problems():
    with pytest.raises(SchemaDefinitionError) as exc_info:
        define(server={"PORT": number(default="abc")}, client={"API_URL": url()}, client_prefix="")

    assert exc_info.value.keys == ("<client_prefix>", "PORT", "API_URL")
    assert [f.kind for f in exc_info.value.failures] == [FailureKind.NAMING, FailureKind.DEFAULT, FailureKind.NAMING]
