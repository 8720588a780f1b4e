import pytest
from pydantic import ValidationError

from codexi.models import AuthContext, PermissionCategory, TokenPermissions, grants

PERMS = {"llm": ["use"], "agent": ["use", "admin"], "project": [], "cli": []}


def test_empty_request_always_grants():
    assert grants([], PERMS)
    assert grants(None, PERMS)
    assert grants([], {})


def test_all_requested_must_be_held():
    assert grants(["llm:use"], PERMS)
    assert grants(["llm:use", "agent:admin"], PERMS)
    assert not grants(["llm:use", "project:read"], PERMS)
    assert not grants(["agent:use"], {"llm": ["use"]})


def test_unknown_category_not_granted():
    assert not grants(["billing:use"], PERMS)


def test_malformed_entries_fail_closed():
    assert not grants(["llm"], PERMS)
    assert not grants([""], PERMS)
    assert not grants([None], PERMS)  # type: ignore[list-item]
    assert not grants(["llm:use", "nocolon"], PERMS)


def test_split_on_first_colon_only():
    assert grants(["agent:run:fast"], {"agent": ["run:fast"]})
    assert not grants(["agent:run:fast"], {"agent": ["run"]})


def test_non_mapping_permissions_deny():
    assert not grants(["llm:use"], ["llm:use"])  # type: ignore[arg-type]
    assert not grants(["llm:use"], {"llm": "use"})


def test_token_permissions_defaults_and_mapping():
    perms = TokenPermissions(llm=["use", "use"], agent=None)
    assert perms.as_mapping() == {"llm": ["use"], "agent": [], "project": [], "cli": []}
    assert set(perms.as_mapping()) == {c.value for c in PermissionCategory}
    assert perms.allows("llm:use")
    assert not perms.allows("agent:use")


def test_token_permissions_rejects_unknown_category():
    with pytest.raises(ValidationError):
        TokenPermissions.model_validate({"llm": ["use"], "billing": ["pay"]})


def test_token_permissions_rejects_empty_action():
    with pytest.raises(ValidationError):
        TokenPermissions(cli=[""])


def test_auth_context_checks():
    ctx = AuthContext(user_id="u1", token_id="t1", permissions=PERMS)
    assert ctx.has_permission("agent:admin")
    assert not ctx.has_permission("cli:run")
    assert ctx.has_any_permission("cli:run", "llm:use")
    assert ctx.is_personal_token()
    assert not AuthContext(user_id="u1").is_personal_token()
