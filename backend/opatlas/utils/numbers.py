# backend/opatlas/utils/numbers.py

import math


def round_half_up(value: float) -> int:
    """
    0.5 を常に切り上げる丸め。

    組み込みの round() は偶数丸めなので 12.5 -> 12 になるが、
    進捗率や完了率の表示では 12.5 -> 13 に揃える。
    """
    return int(math.floor(value + 0.5))
