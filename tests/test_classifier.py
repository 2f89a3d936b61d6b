import pytest

from stack_src.classifier import Invocation, build_command, classify

KNOWN = frozenset({"blacklight", "nginx", "solr", "db"})
APPS = {"web": ["blacklight", "nginx"]}


def test_application_expands_to_its_services():
    result = classify(["up", "web"], APPS, KNOWN)

    assert result.services == ("blacklight", "nginx")
    assert result.passthrough == ()
    assert result.prefix == ("up",)
    assert result.flags == ()


def test_flag_after_verb_is_not_a_head_flag():
    result = classify(["logs", "-f", "solr"], APPS, KNOWN)

    assert result.flags == ()
    assert result.services == ("solr",)
    assert result.passthrough == ()
    assert result.prefix == ("logs", "-f")


def test_trailing_flag_stops_classification():
    result = classify(["down", "-v"], APPS, KNOWN)

    assert result.flags == ()
    assert result.services == ()
    assert result.passthrough == ()
    assert result.prefix == ("down", "-v")


def test_head_flags_are_collected_in_order():
    result = classify(["--verbose", "--ansi=never", "up", "db"], APPS, KNOWN)

    assert result.flags == ("--verbose", "--ansi=never")
    assert result.prefix == ("up",)
    assert result.services == ("db",)


@pytest.mark.parametrize("tokens", [[], ["up"]])
def test_no_trailing_classification_for_short_input(tokens):
    result = classify(tokens, APPS, KNOWN)

    assert result.flags == ()
    assert result.services == ()
    assert result.passthrough == ()
    assert result.prefix == tuple(tokens)


def test_only_flags():
    result = classify(["--version"], APPS, KNOWN)

    assert result.flags == ("--version",)
    assert result.prefix == ()


def test_unknown_tokens_are_passed_through_in_reverse_encounter_order():
    result = classify(["exec", "shell", "ls", "/tmp"], APPS, KNOWN)

    assert result.services == ()
    assert result.passthrough == ("/tmp", "ls", "shell")
    assert result.prefix == ("exec",)
    assert result.compose_args() == ["exec", "shell", "ls", "/tmp"]


def test_services_are_deduplicated_in_first_seen_order():
    apps = {"web": ["nginx", "blacklight", "nginx"], "all": ["db", "nginx"]}

    result = classify(["up", "web", "all", "db"], apps, KNOWN)

    # Consumed from the tail: db, all, web
    assert result.services == ("db", "nginx", "blacklight")


def test_alias_members_are_filtered_by_known_services():
    apps = {"web": ["blacklight", "varnish", "nginx"]}

    result = classify(["up", "web"], apps, KNOWN)

    assert result.services == ("blacklight", "nginx")
    assert all(name in KNOWN for name in result.services)


def test_alias_without_known_services_is_dropped_and_reported():
    apps = {"search": ["elasticsearch"]}

    result = classify(["up", "search", "db"], apps, KNOWN)

    assert result.services == ("db",)
    assert result.passthrough == ()
    assert result.dropped_aliases == ("search",)
    assert "search" not in result.compose_args()


def test_alias_takes_precedence_over_service_of_the_same_name():
    apps = {"solr": ["solr", "db"]}

    result = classify(["up", "solr"], apps, KNOWN)

    assert result.services == ("solr", "db")


def test_classification_is_repeatable():
    tokens = ["--verbose", "run", "web", "bundle", "exec", "rake"]

    assert classify(tokens, APPS, KNOWN) == classify(tokens, APPS, KNOWN)


def test_input_is_not_mutated():
    tokens = ["up", "web"]
    classify(tokens, APPS, KNOWN)
    assert tokens == ["up", "web"]


def test_build_command_reassembles_in_order():
    invocation = classify(["--verbose", "run", "--rm", "web", "rake"], APPS, KNOWN)

    cmd = build_command(invocation, ["docker", "compose", "-f", "dc.yml"])

    assert cmd == [
        "docker",
        "compose",
        "-f",
        "dc.yml",
        "--verbose",
        "run",
        "--rm",
        "blacklight",
        "nginx",
        "rake",
    ]


@pytest.mark.parametrize(
    ("tokens", "expected"),
    [
        (["up", "web"], True),
        (["up", "-d", "web"], False),
        (["up", "--detach"], False),
        (["up", "-dV", "web"], False),
        (["--verbose", "up"], True),
        (["logs", "-f"], False),
        (["down"], False),
    ],
)
def test_foreground_up_detection(tokens, expected):
    assert classify(tokens, APPS, KNOWN).is_foreground_up is expected


def test_invocation_defaults():
    invocation = Invocation(argv=())
    assert invocation.verb is None
    assert invocation.compose_args() == []
