from unittest import mock

from click.testing import CliRunner
from testfixtures import compare

from imagelist_events.__main__ import cli


@mock.patch("imagelist_events.__main__.watch_events")
def test_cli__watch_events_with_configuration(watch_events):
    runner = CliRunner()

    res = runner.invoke(cli, ["--imagelist-url", "http://imagelist", "--max-attempts", "5"])

    compare(res.exit_code, 0)
    watch_events.assert_called_once()

    config = watch_events.call_args.args[0]
    compare(config.images_url, "http://imagelist/images")
    compare(config.max_attempts, 5)


@mock.patch("imagelist_events.__main__.watch_events")
def test_cli__read_url_from_environment(watch_events):
    runner = CliRunner()

    res = runner.invoke(cli, [], env={"IMAGELIST_URL": "http://imagelist"})

    compare(res.exit_code, 0)
    compare(watch_events.call_args.args[0].imagelist_url, "http://imagelist")


@mock.patch("imagelist_events.__main__.watch_events")
def test_cli__exit_with_error_if_url_is_missing(watch_events):
    runner = CliRunner()

    res = runner.invoke(cli, [], env={"IMAGELIST_URL": ""})

    compare(res.exit_code, 1)
    assert "imagelist-url needs to be set" in res.output
    watch_events.assert_not_called()


@mock.patch("imagelist_events.__main__.watch_events")
def test_cli__exit_with_error_if_url_is_invalid(watch_events):
    runner = CliRunner()

    res = runner.invoke(cli, ["--imagelist-url", "http://[::1"])

    compare(res.exit_code, 1)
    assert "failed to parse imagelist url" in res.output
    watch_events.assert_not_called()


def test_cli__print_version():
    runner = CliRunner()

    res = runner.invoke(cli, ["--version"])

    compare(res.exit_code, 0)
    assert "v0.0.1" in res.output
