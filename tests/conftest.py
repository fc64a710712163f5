import pytest

from slimefield.config import Config
from slimefield.world import World


def small_config(**overrides):
    cfg = Config()
    cfg.width = 24
    cfg.height = 16
    cfg.initial_colonies = 4
    for k, v in overrides.items():
        setattr(cfg, k, v)
    return cfg


@pytest.fixture
def make_cfg():
    return small_config


@pytest.fixture
def cfg():
    return small_config()


@pytest.fixture
def world(cfg):
    return World(cfg)


@pytest.fixture
def empty_world():
    return World(small_config(initial_colonies=0))
