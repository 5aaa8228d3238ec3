# parallel/conftest.py
"""Fixtures for testing the parallel submodule."""

import pytest

import adaptprom


class CountingCommunicator(adaptprom.parallel.SerialCommunicator):
    """Serial communicator that counts its reductions."""

    def __init__(self):
        self.num_reductions = 0

    def allreduce_sum(self, values):
        self.num_reductions += 1
        return values


@pytest.fixture
def counting_comm():
    return CountingCommunicator()
