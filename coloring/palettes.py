import numpy as np
from scipy.interpolate import interp1d


def create_smooth_gradient(palette, resolution=256, interpolation='linear'):
    """
    Expands a few RGB control colors (0-255) into `resolution` evenly spaced
    colors. The first and last control colors are the gradient endpoints.

    Cubic interpolation needs at least 4 control colors; shorter palettes
    are interpolated linearly.
    """
    if len(palette) < 2:
        raise ValueError("Palette must contain at least two colors for interpolation.")
    if interpolation == 'cubic' and len(palette) < 4:
        interpolation = 'linear'

    controls = np.array(palette, dtype=np.float32)
    positions = np.arange(len(controls))
    curve = interp1d(positions, controls, kind=interpolation, axis=0)
    samples = curve(np.linspace(0, len(controls) - 1, num=resolution))
    samples = np.clip(np.round(samples), 0, 255).astype(int)
    return [tuple(int(v) for v in color) for color in samples]


# Control colors for the CUSTOM scheme presets
base_palettes = {
    "Classic": [
        (0, 7, 100), (32, 107, 203), (237, 255, 255),
        (255, 170, 0), (0, 2, 0)],

    "Ocean": [
        (0, 0, 0), (0, 32, 64), (0, 64, 128), (0, 96, 192),
        (0, 128, 255), (64, 160, 255), (128, 192, 255)],

    "Sunset": [
        (0, 0, 0), (44, 0, 44), (128, 0, 64),
        (255, 94, 77), (255, 195, 113), (255, 255, 204)],

    "Viridis": [
        (68, 1, 84), (59, 82, 139), (33, 145, 140),
        (94, 201, 98), (253, 231, 37)],
}

palettes = {name: base_palettes[name] for name in sorted(base_palettes)}
