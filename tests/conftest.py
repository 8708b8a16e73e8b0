"""Pytest fixtures for the relay tests."""

import pytest

from pesarelay.config import Settings

from helpers import FakeGateway, make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()
