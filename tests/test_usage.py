import pytest

from octo.ext.commands import ArgumentKind, GrammarError, humanize_usage, parse_usage


def test_required_then_optional_parses():
    specs = parse_usage("<a:string> [b:string]")
    assert [(s.name, s.required) for s in specs] == [("a", True), ("b", False)]


def test_required_after_optional_is_rejected():
    with pytest.raises(GrammarError):
        parse_usage("[a:string] <b:string>")


def test_rest_must_be_last():
    with pytest.raises(GrammarError):
        parse_usage("<a:string...> <b:string>")

    specs = parse_usage("<a:string> <b:string...>")
    assert specs[-1].rest
    assert specs[-1].type_name == "string"
    assert not specs[0].rest


def test_sigils_select_kind():
    specs = parse_usage("<@@who> <@user> <#where> <add>")
    assert [s.name for s in specs] == ["who", "user", "where", "add"]
    assert [s.kind for s in specs] == [
        ArgumentKind.MEMBER,
        ArgumentKind.USER,
        ArgumentKind.CHANNEL,
        ArgumentKind.LITERAL,
    ]


def test_type_aliases_and_unknown_types():
    specs = parse_usage("<n:num> <c:chan> [flag:boolean] [x:wat]")
    assert specs[0].kind is ArgumentKind.INT
    assert specs[1].kind is ArgumentKind.CHANNEL
    assert specs[2].kind is ArgumentKind.BOOL
    assert specs[3].kind is None
    assert specs[3].type_name == "wat"


def test_spaces_inside_tags_are_ignored():
    specs = parse_usage("< target : user >")
    assert specs[0].name == "target"
    assert specs[0].type_name == "user"


def test_empty_usage():
    assert parse_usage("") == []


@pytest.mark.parametrize(
    "usage",
    [
        "<a:string",
        "<a:string]",
        "<a:<b:string>>",
        "a <b:string>",
        "<:string>",
        "]",
    ],
)
def test_malformed_usage(usage):
    with pytest.raises(GrammarError) as info:
        parse_usage(usage)
    assert info.value.usage == usage


def test_humanize_usage():
    assert humanize_usage("<user:user> [words:string...]") == "<user> [words...]"
    assert humanize_usage("<verb>") == "<verb>"


def test_spec_str_round_trips_display():
    spec = parse_usage("[words:string...]")[0]
    assert str(spec) == "[words:string...]"
