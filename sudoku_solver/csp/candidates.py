# -*- coding: utf-8 -*-
"""
1 マス分の候補集合（CandidateSet）を 9 ビットのマスクで表すモジュールです。

ビット i（0 始まり）が立っていれば、数字 i + 1 がまだ候補に残っています。
- EMPTY (0)           : 候補なし。マスとして「破綻」した状態
- ANY   (0b111111111) : 何も分かっていない状態（1〜9 すべて候補）

集合演算は & (共通部分) と | (和集合) で行います。
"""

from __future__ import annotations

from typing import Iterator, List, Optional

from ..types import ALL_DIGITS, Digit

FULL_MASK = (1 << 9) - 1  # 0b111111111


def bit(d: Digit) -> int:
    """数字 d に対応するビットを返します。"""
    return 1 << d.index()


def is_single(mask: int) -> bool:
    """マスクがちょうど 1 ビットだけ立っているかを判定します。"""
    return mask != 0 and mask & (mask - 1) == 0


def mask_to_digits(mask: int) -> List[Digit]:
    return [d for d in ALL_DIGITS if mask >> d.index() & 1]


class _Constant:
    # 共有インスタンスを書き換えられないよう、参照のたびに新しい集合を返す
    def __init__(self, bits: int) -> None:
        self.bits = bits

    def __get__(self, obj, owner):
        return owner(self.bits)


class CandidateSet:
    """
    1 マスに残っている候補数字の集合です。

    値として扱えるよう、演算子 & / | は常に新しい集合を返します。
    その場で書き換えるのは :meth:`add`, :meth:`remove` と &=, |= だけです。
    """

    __slots__ = ("bits",)

    EMPTY = _Constant(0)
    ANY = _Constant(FULL_MASK)

    def __init__(self, bits: int = 0) -> None:
        bits = int(bits)
        if not 0 <= bits <= FULL_MASK:
            raise ValueError(f"Candidate mask out of range: {bits:#x}")
        self.bits = bits

    @classmethod
    def from_digit(cls, d: Digit) -> "CandidateSet":
        return cls(bit(d))

    @classmethod
    def initial_state(cls, value: Optional[Digit]) -> "CandidateSet":
        """
        問題の 1 マスから初期の候補集合を作ります。

        数字が与えられていればその 1 つだけ、空きマスなら 1〜9 すべて。
        """
        if value is None:
            return cls(FULL_MASK)
        return cls.from_digit(value)

    def is_broken(self) -> bool:
        return self.bits == 0

    def count(self) -> int:
        return self.bits.bit_count()

    def contains(self, d: Digit) -> bool:
        return bool(self.bits & bit(d))

    def add(self, d: Digit) -> None:
        self.bits |= bit(d)

    def remove(self, d: Digit) -> None:
        self.bits &= ~bit(d) & FULL_MASK

    def determined(self) -> Optional[Digit]:
        """候補がちょうど 1 つならその数字、そうでなければ None。"""
        if is_single(self.bits):
            return Digit.unchecked(self.bits.bit_length())
        return None

    def options(self) -> List[Digit]:
        """候補の数字を昇順で返します（分岐の順番はこれで決まります）。"""
        return mask_to_digits(self.bits)

    def copy(self) -> "CandidateSet":
        return CandidateSet(self.bits)

    def __and__(self, other: "CandidateSet") -> "CandidateSet":
        if not isinstance(other, CandidateSet):
            return NotImplemented
        return CandidateSet(self.bits & other.bits)

    def __or__(self, other: "CandidateSet") -> "CandidateSet":
        if not isinstance(other, CandidateSet):
            return NotImplemented
        return CandidateSet(self.bits | other.bits)

    def __iand__(self, other: "CandidateSet") -> "CandidateSet":
        if not isinstance(other, CandidateSet):
            return NotImplemented
        self.bits &= other.bits
        return self

    def __ior__(self, other: "CandidateSet") -> "CandidateSet":
        if not isinstance(other, CandidateSet):
            return NotImplemented
        self.bits |= other.bits
        return self

    def __contains__(self, d: Digit) -> bool:
        return self.contains(d)

    def __iter__(self) -> Iterator[Digit]:
        return iter(self.options())

    def __len__(self) -> int:
        return self.count()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CandidateSet):
            return NotImplemented
        return self.bits == other.bits

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"CandidateSet({{{', '.join(str(d) for d in self.options())}}})"
