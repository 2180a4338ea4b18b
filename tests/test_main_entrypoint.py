import logging
import unittest
from unittest.mock import patch

from algoradar import __main__ as entrypoint
from algoradar.utils.logger import get_logger, set_level
from tests.fixture_helpers import make_settings


class MainEntrypointTests(unittest.TestCase):
    def tearDown(self) -> None:
        set_level(logging.INFO)

    def test_configured_level_reaches_package_loggers_and_uvicorn(self) -> None:
        child = get_logger("algoradar.tests.entrypoint_child", level=logging.DEBUG)
        settings = make_settings(log_level="warning", host="127.0.0.1", port=9000)

        with (
            patch("algoradar.__main__.get_settings", return_value=settings),
            patch("algoradar.__main__.uvicorn.run") as run,
        ):
            entrypoint.main()

        self.assertEqual(child.level, logging.WARNING)
        self.assertEqual(logging.getLogger("algoradar").level, logging.WARNING)
        run.assert_called_once_with(
            "algoradar.api:app", host="127.0.0.1", port=9000, log_level="warning"
        )

    def test_unknown_level_runs_at_info(self) -> None:
        settings = make_settings(log_level="chatty")

        with (
            patch("algoradar.__main__.get_settings", return_value=settings),
            patch("algoradar.__main__.uvicorn.run") as run,
        ):
            entrypoint.main()

        self.assertEqual(logging.getLogger("algoradar").level, logging.INFO)
        self.assertEqual(run.call_args.kwargs["log_level"], "info")


if __name__ == "__main__":
    unittest.main()
