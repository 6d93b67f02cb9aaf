#!/usr/bin/env python3
import logging

from cas import CAS
from expression import cos, integer, pi, sin, sqrt, symbols


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    cas = CAS()
    x = symbols("x")
    examples = [
        sqrt(8),
        sqrt(18) + sqrt(2),
        sqrt(3) * sqrt(12),
        sin(-x),
        sin(pi / 6),
        sin(x) ** 2 + cos(x) ** 2,
        (2 * sqrt(2)) ** 2,
        integer(10) ** 10000,
    ]
    for e in examples:
        r = cas.simplify_with_report(e)
        note = f"  [guard: {r.guard_reason}]" if r.guard_tripped else ""
        print(f"{e}  =>  {r.expression}{note}")
    f = x ** 3 + 2 * x ** 2 + x
    print(f"d/dx {f}  =>  {cas.differentiate(f, x)}")


if __name__ == "__main__":
    main()
