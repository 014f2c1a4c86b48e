import math

from pyslsm import Boundary, Mesh, LevelSet, CircleLevelSet

R = 0.3123
exact = 2 * math.pi * R
prev = None
print(f"{'n':>5} {'length':>12} {'rel. error':>12} {'rate':>6}")
for n in (8, 16, 32, 64, 128, 256):
    mesh = Mesh.structured(1.0, 1.0, nx=n, ny=n)
    ls = LevelSet.from_function(mesh, CircleLevelSet(center=(0.51, 0.49), radius=R))
    b = Boundary().discretise(ls)
    err = abs(b.length - exact) / exact
    rate = "" if prev is None else f"{math.log2(prev / err):6.2f}"
    print(f"{n:5d} {b.length:12.8f} {err:12.3e} {rate}")
    prev = err
