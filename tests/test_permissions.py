import pytest

from conftest import AUTHOR, GUILD_ID, OWNER, guild_payload
from octo.models import Guild, Member
from octo.permissions import (
    PERMISSIONS,
    Permissions,
    describe_permissions,
    permission_names,
    resolve_permissions,
)

MOD_ROLE = {"id": "777777777777777777", "name": "Mods", "permissions": str(PERMISSIONS["kick_members"])}
HELPER_ROLE = {"id": "888888888888888888", "name": "Helpers", "permissions": str(PERMISSIONS["manage_messages"])}


def make_guild(everyone=0, roles=()):
    data = guild_payload(roles=list(roles))
    data["roles"][0]["permissions"] = str(everyone)
    return Guild.from_dict(data)


def make_member(user, *role_ids):
    return Member.from_dict({"user": user, "roles": list(role_ids)}, GUILD_ID)


def test_owner_holds_everything():
    guild = make_guild()
    assert Permissions.for_member(guild, make_member(OWNER)) == Permissions.all()


def test_roles_are_combined_with_everyone():
    guild = make_guild(everyone=PERMISSIONS["send_messages"], roles=[MOD_ROLE, HELPER_ROLE])
    perms = Permissions.for_member(guild, make_member(AUTHOR, MOD_ROLE["id"], HELPER_ROLE["id"]))

    assert perms.send_messages
    assert perms.kick_members
    assert perms.manage_messages
    assert not perms.ban_members


def test_unknown_roles_are_ignored():
    guild = make_guild()
    assert Permissions.for_member(guild, make_member(AUTHOR, "999")) == Permissions.none()


def test_administrator_grants_all():
    admin = {"id": "123456789012345678", "name": "Admin", "permissions": str(PERMISSIONS["administrator"])}
    guild = make_guild(roles=[admin])
    perms = Permissions.for_member(guild, make_member(AUTHOR, admin["id"]))
    assert perms.has(PERMISSIONS["ban_members"] | PERMISSIONS["manage_guild"])


def test_missing_guild_or_member():
    assert Permissions.for_member(None, make_member(AUTHOR)) == Permissions.none()
    assert Permissions.for_member(make_guild(), None) == Permissions.none()


def test_attribute_access_and_update():
    perms = Permissions(kick_members=True)
    assert perms.kick_members
    perms.ban_members = True
    assert int(perms) == PERMISSIONS["kick_members"] | PERMISSIONS["ban_members"]

    perms.update(kick_members=False)
    assert int(perms) == PERMISSIONS["ban_members"]

    with pytest.raises(AttributeError):
        perms.update(fly=True)


def test_resolve_permissions():
    assert resolve_permissions("ban_members") == PERMISSIONS["ban_members"]
    assert resolve_permissions(4, kick_members=True) == 6
    assert resolve_permissions(Permissions(8)) == 8
    assert resolve_permissions() == 0

    with pytest.raises(KeyError):
        resolve_permissions("fly")


def test_names_follow_display_order():
    bits = PERMISSIONS["send_messages"] | PERMISSIONS["ban_members"] | PERMISSIONS["administrator"]
    assert permission_names(bits) == ["Administrator", "Ban Members", "Send Messages"]
    assert describe_permissions(bits) == "Administrator, Ban Members, Send Messages"
    assert describe_permissions(0) == "/"
