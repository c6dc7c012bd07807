"""
Unit tests for fault conversion in reraise_as.
"""

import threading

import pytest
from unittest.mock import patch

from ikvmbuild.build import ExtractionError
from ikvmbuild.config import ResolutionError
from ikvmbuild.interrupt_utils import reraise_as


class TestReraiseAs:
    """Test suite for reraise_as."""

    def test_fault_converted_and_chained(self):
        with pytest.raises(ExtractionError, match="Error extracting classes from: a.jar: bad zip") as exc_info:
            with reraise_as(ExtractionError, "Error extracting classes from: a.jar"):
                raise ValueError("bad zip")
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_passthrough_not_rewrapped(self):
        original = ResolutionError("manifest missing")
        with pytest.raises(ResolutionError) as exc_info:
            with reraise_as(ResolutionError, "Failed", passthrough=(ResolutionError,)):
                raise original
        assert exc_info.value is original

    def test_no_fault(self):
        with reraise_as(ExtractionError, "unused"):
            value = 1
        assert value == 1

    def test_keyboard_interrupt_on_main_thread(self):
        with patch("_thread.interrupt_main") as interrupt_main:
            with pytest.raises(KeyboardInterrupt):
                with reraise_as(ExtractionError, "unused"):
                    raise KeyboardInterrupt
        interrupt_main.assert_not_called()

    def test_keyboard_interrupt_in_worker_thread_interrupts_main(self):
        seen = []

        def worker():
            try:
                with reraise_as(ExtractionError, "unused"):
                    raise KeyboardInterrupt
            except KeyboardInterrupt:
                seen.append("interrupt")

        with patch("_thread.interrupt_main") as interrupt_main:
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()

        assert seen == ["interrupt"]
        interrupt_main.assert_called_once()
