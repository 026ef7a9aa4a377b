"""Tests for configuration loading."""

import math

import pytest
import yaml

from tictactoe_mcts.games.tictactoe import TicTacToeGame
from tictactoe_mcts.mcts import GreedyRollout, MCTSEngine
from tictactoe_mcts.utils import Config, MCTSConfig, get_default_config


class TestConfig:
    def test_defaults(self):
        config = get_default_config()
        assert config.mcts.iterations == 1000
        assert config.mcts.exploration_constant == pytest.approx(math.sqrt(2))
        assert config.mcts.rollout == "random"
        assert not config.mcts.reuse_tree
        assert config.play.game == "tictactoe"
        assert config.seed == 42

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "config.yaml"
        config = Config(mcts=MCTSConfig(iterations=250, rollout="greedy"), seed=7)
        config.save(str(path))

        loaded = Config.load(str(path))
        assert loaded.mcts.iterations == 250
        assert loaded.mcts.rollout == "greedy"
        assert loaded.seed == 7

    def test_partial_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"mcts": {"iterations": 50}}))

        loaded = Config.load(str(path))
        assert loaded.mcts.iterations == 50
        assert loaded.mcts.temperature == 0.0
        assert loaded.arena.games == 20

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert Config.load(str(path)) == Config()

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValueError, match="c_puct"):
            Config.from_dict({"mcts": {"c_puct": 1.5}})
        with pytest.raises(ValueError, match="device"):
            Config.from_dict({"device": "cuda"})

    def test_invalid_values(self):
        with pytest.raises(ValueError):
            MCTSConfig(iterations=0)
        with pytest.raises(ValueError):
            MCTSConfig(exploration_constant=-1.0)

    def test_build_engine(self):
        config = Config(mcts=MCTSConfig(rollout="greedy", exploration_constant=0.5, reuse_tree=True))
        engine = config.build_engine(TicTacToeGame())

        assert isinstance(engine, MCTSEngine)
        assert isinstance(engine.rollout_policy, GreedyRollout)
        assert engine.exploration_constant == 0.5
        assert engine.reuse_tree

    def test_built_engines_are_reproducible(self):
        game = TicTacToeGame()
        config = Config(mcts=MCTSConfig(iterations=200), seed=11)

        move1 = config.build_engine(game).choose_move(game.initial_state(), 200)
        move2 = config.build_engine(game).choose_move(game.initial_state(), 200)
        assert move1 == move2
