"""
高速な近似対数

UCB式の log(総試行回数) は探索のボトルネックになるため、
float32 のビット表現から指数部を取り出し、仮数部を有理式で補正して近似する。
入力を定数 LOG_RADIX で割ってから log2(LOG_RADIX) を足し戻すことで、
UCBで扱う回数域の誤差を揃えている
"""

import numpy as np

LOG_RADIX = np.float32(10e6)
LOG_OF_RADIX = np.float32(np.log2(LOG_RADIX))
LN_2 = np.float32(0.69314718)

_MANTISSA_MASK = np.uint32(0x007FFFFF)
_HALF_EXPONENT = np.uint32(0x3F000000)
_INV_2_POW_23 = np.float32(1.1920928955078125e-7)


def _fastlog2_array(vx: np.ndarray) -> np.ndarray:
    bits = vx.view(np.uint32)

    # 仮数部を [0.5, 1) の float に詰め直す
    mx = ((bits & _MANTISSA_MASK) | _HALF_EXPONENT).view(np.float32)
    y = bits.astype(np.float32) * _INV_2_POW_23

    return (y - np.float32(124.22551499)
            - np.float32(1.498030302) * mx
            - np.float32(1.72587999) / (np.float32(0.3520887068) + mx))


def fastlog2(x):
    """
    log2 の近似値

    Args:
        x: 正の有限値（スカラーまたは np.ndarray）

    Returns:
        float または np.ndarray: log2(x) の近似
    """
    vx = np.atleast_1d(np.asarray(x, dtype=np.float32))
    result = _fastlog2_array(vx)

    if np.ndim(x) == 0:
        return float(result[0])
    return result


def fastlog(x):
    """
    自然対数の近似値

    x >= 1 での絶対誤差は 1e-3 未満

    Args:
        x: 正の有限値（スカラーまたは np.ndarray）

    Returns:
        float または np.ndarray: ln(x) の近似
    """
    scaled = np.atleast_1d(np.asarray(x, dtype=np.float32)) / LOG_RADIX
    result = LN_2 * (_fastlog2_array(scaled.astype(np.float32)) + LOG_OF_RADIX)

    if np.ndim(x) == 0:
        return float(result[0])
    return result
