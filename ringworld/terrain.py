"""Terrain height sampling.

The ring builder treats height sampling as an external collaborator: any
object with ``sample(world_x, world_z, lod) -> float`` can shape a segment.
``FractalNoiseSampler`` is the default, a seeded multi-octave Perlin field
where coarser LODs drop the highest-frequency octaves.
"""

import logging
from typing import Protocol

import numpy as np

logger = logging.getLogger(__name__)

# Range of the random per-octave offsets
_OCTAVE_OFFSET_RANGE = 100000.0


class TerrainSampler(Protocol):
    def sample(self, world_x: float, world_z: float, lod: int) -> float:
        ...


class PerlinNoise:
    """Deterministic 2D Perlin noise over numpy arrays or scalars."""

    def __init__(self, seed=0):
        rng = np.random.default_rng(seed)
        perm = rng.permutation(256).astype(np.int64)
        self.perm = np.concatenate([perm, perm])

    @staticmethod
    def _fade(t):
        return t * t * t * (t * (t * 6 - 15) + 10)

    @staticmethod
    def _lerp(a, b, t):
        return a + t * (b - a)

    @staticmethod
    def _grad(hash_val, x, y):
        h = hash_val & 7
        u = np.where(h < 4, x, y)
        v = np.where(h < 4, y, x)
        return (np.where(h & 1, -u, u) +
                np.where(h & 2, -2.0 * v, 2.0 * v))

    def noise2d(self, x, y):
        """Noise in roughly ``[-1, 1]`` at (x, y)."""
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        xf = np.floor(x)
        yf = np.floor(y)
        X = xf.astype(np.int64) & 255
        Y = yf.astype(np.int64) & 255
        x = x - xf
        y = y - yf

        u = self._fade(x)
        v = self._fade(y)

        p = self.perm
        aa = p[p[X] + Y]
        ab = p[p[X] + Y + 1]
        ba = p[p[X + 1] + Y]
        bb = p[p[X + 1] + Y + 1]

        x1 = self._lerp(self._grad(aa, x, y), self._grad(ba, x - 1, y), u)
        x2 = self._lerp(self._grad(ab, x, y - 1),
                        self._grad(bb, x - 1, y - 1), u)
        return self._lerp(x1, x2, v) * 0.5


class FractalNoiseSampler:
    """Fractal Perlin height field normalised to ``[0, 1]`` before shaping.

    Parameters mirror the ring configuration's terrain fields. The returned
    height is ``height_curve(n) * height_multiplier`` where ``n`` is the
    normalised fractal value. Each LOD step removes one octave, down to a
    single octave.
    """

    def __init__(self, noise_scale=250.0, octaves=4, persistence=0.5,
                 lacunarity=2.0, seed=0, height_multiplier=1.0,
                 height_curve=None):
        if noise_scale <= 0:
            noise_scale = 0.0001
        self.noise_scale = noise_scale
        self.octaves = max(1, int(octaves))
        self.persistence = persistence
        self.lacunarity = lacunarity
        self.height_multiplier = height_multiplier
        self.height_curve = height_curve
        self._noise = PerlinNoise(seed)

        rng = np.random.default_rng(seed)
        self._offsets = rng.uniform(-_OCTAVE_OFFSET_RANGE, _OCTAVE_OFFSET_RANGE,
                                    size=(self.octaves, 2))

    @classmethod
    def from_config(cls, config):
        return cls(noise_scale=config.noise_scale, octaves=config.octaves,
                   persistence=config.persistence,
                   lacunarity=config.lacunarity, seed=config.seed,
                   height_multiplier=config.height_multiplier,
                   height_curve=config.height_curve)

    def octaves_for_lod(self, lod: int) -> int:
        return max(1, self.octaves - max(0, int(lod)))

    def sample_batch(self, xs, zs, lod: int):
        """Vectorized ``sample`` for arrays of world coordinates."""
        xs = np.asarray(xs, dtype=np.float64)
        zs = np.asarray(zs, dtype=np.float64)

        total = np.zeros(np.broadcast(xs, zs).shape, dtype=np.float64)
        amplitude = 1.0
        frequency = 1.0
        max_value = 0.0
        for octave in range(self.octaves_for_lod(lod)):
            ox, oz = self._offsets[octave]
            sx = xs / self.noise_scale * frequency + ox
            sz = zs / self.noise_scale * frequency + oz
            total += self._noise.noise2d(sx, sz) * amplitude
            max_value += amplitude
            amplitude *= self.persistence
            frequency *= self.lacunarity

        normalised = np.clip((total / max_value + 1.0) / 2.0, 0.0, 1.0)
        if self.height_curve is not None:
            normalised = np.vectorize(self.height_curve, otypes=[float])(normalised)
        return normalised * self.height_multiplier

    def sample(self, world_x: float, world_z: float, lod: int) -> float:
        return float(self.sample_batch(world_x, world_z, lod))


class FlatSampler:
    """Sampler that returns a constant height."""

    def __init__(self, height=0.0):
        self.height = height

    def sample(self, world_x: float, world_z: float, lod: int) -> float:
        return self.height

    def sample_batch(self, xs, zs, lod: int):
        return np.full(np.broadcast(xs, zs).shape, self.height, dtype=np.float64)


def sample_grid(sampler, xs, zs, lod: int) -> np.ndarray:
    """Heights for arrays of world coordinates.

    Uses the sampler's ``sample_batch`` when it has one, otherwise calls
    ``sample`` once per point.
    """
    batch = getattr(sampler, "sample_batch", None)
    if batch is not None:
        return np.asarray(batch(xs, zs, lod), dtype=np.float64)
    return np.vectorize(lambda x, z: sampler.sample(float(x), float(z), lod),
                        otypes=[float])(xs, zs)
