import io

from rich.console import Console

from imagelist_events.utils import Logger


def _logger():
    return Logger(Console(file=io.StringIO(), record=True, width=400))


def test_Logger__print_messages_without_markup():
    logger = _logger()

    logger.log("image [foo/bar:v1] pushed")
    logger.success("submitted foo/bar@sha256:abc")

    output = logger.console.export_text()
    assert "image [foo/bar:v1] pushed" in output
    assert "submitted foo/bar@sha256:abc" in output


def test_Logger__prefix_errors():
    logger = _logger()

    logger.error("failed to read events")

    assert "ERROR failed to read events" in logger.console.export_text()


def test_Logger__print_traceback_of_handled_exception():
    logger = _logger()

    try:
        raise RuntimeError("unexpected failure")

    except RuntimeError:
        logger.exception("failed to resolve 'foo/bar:v1' image")

    output = logger.console.export_text()
    assert "ERROR failed to resolve 'foo/bar:v1' image" in output
    assert "Traceback" in output
    assert "RuntimeError: unexpected failure" in output
