"""
Tests for the Timer utility.
"""

import logging
import threading
import time

from IV_Libs.ImageDataLib.timer import Timer


class TestTimer:
    """Tests for Timer class."""

    def test_elapsed_grows(self):
        timer = Timer()
        first = timer.elapsed()
        time.sleep(0.01)

        assert timer.elapsed() > first

    def test_reset_restarts(self):
        timer = Timer()
        time.sleep(0.02)

        timer.reset()

        assert timer.elapsed() < 0.02

    def test_report_logs_and_returns_total(self, caplog):
        timer = Timer()
        time.sleep(0.01)

        with caplog.at_level(logging.DEBUG, logger="IV_Libs.ImageDataLib.timer"):
            total = timer.report("decode")

        assert total >= 0.01
        assert "decode: elapsed time=" in caplog.text

    def test_report_accumulates(self):
        timer = Timer()
        first = timer.report()
        time.sleep(0.005)

        assert timer.report() >= first

    def test_shared_between_threads(self):
        timer = Timer()
        results = []

        def worker():
            for _ in range(100):
                results.append(timer.report())

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 400
        assert all(value >= 0 for value in results)
