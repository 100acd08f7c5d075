import logging

import pytest

from doccompare.logging.logger import Log


class TestLog:
    def test_configure_attaches_one_handler(self) -> None:
        Log.configure("INFO")
        Log.configure("INFO")
        assert len(logging.getLogger("doccompare").handlers) == 1

    def test_configure_quiets_transport_loggers(self) -> None:
        Log.configure("info")
        assert logging.getLogger("doccompare").level == logging.INFO
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("pdfminer").level == logging.WARNING

    def test_extra_fields_reach_the_record(self, caplog: pytest.LogCaptureFixture) -> None:
        Log.configure("DEBUG")
        with caplog.at_level(logging.DEBUG, logger="doccompare"):
            Log.debug("Claimed task", task_id=7)
        assert caplog.records[-1].task_id == 7
        Log.configure("INFO")
