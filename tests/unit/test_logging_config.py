"""Tests for the log sinks."""

from loguru import logger

from promo_shorts.core.logging_config import NO_JOB, get_logger, setup_logging


def test_file_sink_carries_the_job_id(tmp_path):
    log_file = tmp_path / "logs" / "engine.log"
    setup_logging(log_level="DEBUG", log_file=log_file)
    try:
        get_logger("promo_shorts.test", job_id="1700000000000").info("rendering")
        get_logger("promo_shorts.test").info("startup")
        logger.complete()
    finally:
        setup_logging()

    lines = log_file.read_text().splitlines()
    assert "| 1700000000000 |" in lines[0]
    assert lines[0].endswith("rendering")
    assert f"| {NO_JOB} |" in lines[1]
