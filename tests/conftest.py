import logging

import pytest

from qrgen.ecc import Ecc, add_ecc_and_interleave, get_num_data_codewords
from qrgen.builder import QrCodeBuilder


@pytest.fixture(autouse=True)
def restore_qrgen_logger():
    """setup_logging() replaces handlers on the shared qrgen logger; undo it after each test."""
    logger = logging.getLogger("qrgen")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


def make_builder(version: int, ecl: Ecc = Ecc.LOW) -> QrCodeBuilder:
    """A builder with function patterns and deterministic codewords drawn."""
    data = bytes(i * 7 % 256 for i in range(get_num_data_codewords(version, ecl)))
    builder = QrCodeBuilder(version)
    builder.draw_function_patterns(ecl)
    builder.draw_codewords(add_ecc_and_interleave(version, ecl, data))
    return builder


@pytest.fixture
def builder_v1():
    return make_builder(1)


@pytest.fixture
def builder_v7():
    return make_builder(7, Ecc.MEDIUM)


@pytest.fixture
def builder_factory():
    return make_builder
