"""近似対数のテスト

誤差の上限と単調性を確認する。
"""

import math

import numpy as np
import pytest

from uct.mcts.fastlog import fastlog, fastlog2


class TestFastLog:
    """fastlogのテスト"""

    @pytest.mark.parametrize("x", [1.0, 2.0, 10.0, 1000.0, 123456.0, 1e6])
    def test_scalar_close_to_log(self, x):
        """スカラー入力で math.log に近いこと"""
        assert fastlog(x) == pytest.approx(math.log(x), abs=1e-3)

    def test_scalar_returns_float(self):
        """スカラー入力ならfloatを返すこと"""
        assert isinstance(fastlog(5.0), float)
        assert isinstance(fastlog2(5.0), float)

    def test_array_input(self):
        """配列入力なら同じ形の配列を返すこと"""
        values = np.array([1.0, 10.0, 100.0])

        result = fastlog(values)

        assert isinstance(result, np.ndarray)
        assert result.shape == values.shape

    def test_error_bound(self):
        """UCBで使う範囲で絶対誤差・相対誤差が小さいこと"""
        values = np.geomspace(1.0, 1e7, 5000)

        approx = fastlog(values)
        exact = np.log(values)

        assert np.max(np.abs(approx - exact)) < 1e-3

        mask = values >= 2.0
        relative = np.abs(approx[mask] - exact[mask]) / exact[mask]
        assert np.max(relative) < 0.01

    def test_monotonic(self):
        """単調増加であること"""
        values = np.geomspace(1.0, 1e6, 2000)

        approx = fastlog(values)

        assert np.all(np.diff(approx) > 0)

    def test_small_epsilon_input(self):
        """総試行回数0のときの入力（1e-4）でも有限値を返すこと"""
        result = fastlog(1e-4)

        assert math.isfinite(result)
        assert result == pytest.approx(math.log(1e-4), abs=1e-3)


class TestFastLog2:
    """fastlog2のテスト"""

    @pytest.mark.parametrize("x, expected", [(1.0, 0.0), (2.0, 1.0), (8.0, 3.0), (1024.0, 10.0)])
    def test_powers_of_two(self, x, expected):
        """2のべき乗で整数に近いこと"""
        assert fastlog2(x) == pytest.approx(expected, abs=1e-3)
