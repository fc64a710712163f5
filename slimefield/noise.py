"""
slimefield: Deterministic RNG & Noise
=====================================
Seeded random stream and fractal value noise. Everything procedural in the
world is derived from one SeededRandom stream plus a ValueNoise whose
permutation table comes from a sub-stream of the same seed, so a seed fully
determines a run.
"""

import hashlib

import numpy as np


# ─────────────────────────────────────────────────────
# Seeds
# ─────────────────────────────────────────────────────

def seed_to_int(seed):
    """Map an int or str seed to a 64-bit integer (sha256 of its text form)."""
    h = hashlib.sha256(str(seed).encode("utf-8")).hexdigest()
    return int(h[:16], 16)


def derive_seed(seed, key):
    return seed_to_int(f"{seed}|{key}")


class SeededRandom:
    """Reproducible uniform stream backed by a numpy Generator."""

    def __init__(self, seed):
        self.seed = seed
        self.gen = np.random.default_rng(seed_to_int(seed))

    def random(self):
        return float(self.gen.random())

    def uniform(self, lo, hi, size=None):
        if size is None:
            return lo + self.random() * (hi - lo)
        return lo + self.gen.random(size) * (hi - lo)

    def index(self, n):
        """Uniform integer in [0, n)."""
        if n <= 0:
            return 0
        return min(n - 1, int(self.random() * n))

    def get_state(self):
        return self.gen.bit_generator.state

    def set_state(self, state):
        self.gen.bit_generator.state = state


# ─────────────────────────────────────────────────────
# Value noise
# ─────────────────────────────────────────────────────

def smoothstep(t):
    return t * t * (3.0 - 2.0 * t)


def lerp(a, b, t):
    return a + (b - a) * t


class ValueNoise:
    """Lattice value noise in [0,1] with fractal (octave) summation.

    Accepts scalar or array coordinates; scalar in, float out.
    """

    def __init__(self, seed):
        self.seed = seed
        rng = SeededRandom(derive_seed(seed, "noise"))
        perm = rng.gen.permutation(256).astype(np.int64)
        self.perm = np.concatenate([perm, perm])

    def _lattice(self, ix, iy):
        return self.perm[(ix + self.perm[iy & 255]) & 255] / 255.0

    def noise2d(self, x, y):
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        x0 = np.floor(x)
        y0 = np.floor(y)
        u = smoothstep(x - x0)
        v = smoothstep(y - y0)
        ix = x0.astype(np.int64)
        iy = y0.astype(np.int64)
        top = lerp(self._lattice(ix, iy), self._lattice(ix + 1, iy), u)
        bottom = lerp(self._lattice(ix, iy + 1), self._lattice(ix + 1, iy + 1), u)
        out = lerp(top, bottom, v)
        return float(out) if out.ndim == 0 else out

    def fractal(self, x, y, octaves=4, lacunarity=2.0, gain=0.5):
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        amp, freq = 1.0, 1.0
        total = np.zeros(np.broadcast(x, y).shape)
        norm = 0.0
        for _ in range(max(1, int(octaves))):
            total = total + amp * self.noise2d(x * freq, y * freq)
            norm += amp
            amp *= gain
            freq *= lacunarity
        out = total / norm
        return float(out) if out.ndim == 0 else out
