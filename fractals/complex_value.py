from dataclasses import dataclass


@dataclass(frozen=True)
class Complex:
    """
    Immutable complex value used by the scalar escape-time functions.
    abs2 is the squared magnitude; the escape test compares it against 4.0
    so no square root is taken in the iteration loop.
    """
    re: float = 0.0
    im: float = 0.0

    def __add__(self, other: "Complex") -> "Complex":
        return Complex(self.re + other.re, self.im + other.im)

    def __mul__(self, other: "Complex") -> "Complex":
        return Complex(self.re * other.re - self.im * other.im,
                       self.re * other.im + self.im * other.re)

    @property
    def abs2(self) -> float:
        return self.re * self.re + self.im * self.im

    def __complex__(self) -> complex:
        return complex(self.re, self.im)

    @classmethod
    def from_complex(cls, value: complex) -> "Complex":
        value = complex(value)
        return cls(value.real, value.imag)

    def __str__(self) -> str:
        sign = "-" if self.im < 0 else "+"
        return f"{self.re:g} {sign} {abs(self.im):g}i"
