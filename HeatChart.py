#!/usr/bin/env python3

"""
Heat Chart Generator
Renders a rectangular grid of z-values as a color-coded heat map,
with an optional title, axis labels, axis values and axis bars.

Table of Contents
   1. Setup
   2. Fundamental Functions
   3. Layout
   4. Drawing Surfaces
   5. Rendering
   6. Charts
   7. Output
"""

# ----------------------1. Setup----------------------------

import math
import os
import re
from dataclasses import dataclass, replace
from decimal import Context, Decimal, ROUND_HALF_UP
from enum import Enum
from functools import cache
from typing import Callable

import toml
from PIL import Image, ImageColor, ImageDraw, ImageFont
import drawsvg as svg


FF = 255
WH = tuple[int, int]
RGB = tuple[int, int, int]
Box = tuple[int, int, int, int]
"""(x0, y0, dx, dy)"""


class Color(Enum):
    WHITE, BLACK = (FF, FF, FF), (0, 0, 0)
    RED, GREEN, BLUE = (FF, 0, 0), (0, FF, 0), (0, 0, FF)
    YELLOW, CYAN, MAGENTA = (FF, FF, 0), (0, FF, FF), (FF, 0, FF)

    GREY = (127, 127, 127)
    LAVENDER = (230, 230, 250)

    @staticmethod
    def to_pil(col_spec):
        return col_spec.value if isinstance(col_spec, Color) else col_spec

    @classmethod
    def to_rgb(cls, col_spec) -> RGB:
        col = cls.to_pil(col_spec)
        if isinstance(col, str):
            return ImageColor.getrgb(col)[:3]
        r, g, b = col[:3]
        return int(r), int(g), int(b)

    @classmethod
    def to_str(cls, col):
        if isinstance(col, str):
            return col
        r, g, b = cls.to_rgb(col)
        return f'rgb({r},{g},{b})'

    @classmethod
    def from_str(cls, color: str):
        return getattr(cls, color.upper(), color)

    @classmethod
    def from_def(cls, col):
        """A color from a definition file: a name, or an [r, g, b] list."""
        return cls.from_str(col) if isinstance(col, str) else tuple(col)


class FontStyle(Enum):
    REG, BOLD = 0, 1


class Font:
    """Fonts are families of TrueType files (regular, bold), looked up on the system font path."""
    Family = tuple[str, str]
    DejaVuSans: Family = ('DejaVuSans', 'DejaVuSans-Bold')
    LiberationSans: Family = ('LiberationSans-Regular', 'LiberationSans-Bold')
    FreeSans: Family = ('FreeSans', 'FreeSansBold')

    @classmethod
    @cache
    def get_truetype_font(cls, font_family: Family, fs: int, font_style: int):
        font_name = font_family[font_style]
        if not font_name.endswith('.ttf'): font_name += '.ttf'
        try:
            return ImageFont.truetype(font_name, fs)
        except OSError:  # family not installed
            return ImageFont.load_default(fs)

    @classmethod
    def family_for(cls, family):
        if isinstance(family, str):
            return getattr(cls, family)
        return tuple(family)


@dataclass(frozen=True)
class FontDef:
    """The font used both to measure and to draw a piece of text."""
    size: int = 10
    style: FontStyle = FontStyle.REG
    family: Font.Family = Font.DejaVuSans

    def resized(self, size: int):
        return replace(self, size=size)

    def to_pil(self):
        return Font.get_truetype_font(self.family, self.size, self.style.value)

    @classmethod
    def from_dict(cls, font_def: dict):
        font_def = dict(font_def)
        if 'style' in font_def:
            font_def['style'] = FontStyle[font_def['style'].upper()]
        if 'family' in font_def:
            font_def['family'] = Font.family_for(font_def['family'])
        return cls(**font_def)


@dataclass(frozen=True)
class TextMetrics:
    width: int
    ascent: int
    descent: int

    @property
    def height(self):
        """line height"""
        return self.ascent + self.descent


def measure_text(font: FontDef, text: str) -> TextMetrics:
    """Measures text with the exact font it will be drawn with."""
    pil_font = font.to_pil()
    ascent, descent = pil_font.getmetrics()
    return TextMetrics(round(pil_font.getlength(text)), ascent, descent)


Measure = Callable[[FontDef, str], TextMetrics]

DEBUG = False


# ----------------------2. Fundamental Functions----------------------------


def round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


class ColorScale(Enum):
    """
    Curve from a z-value's fractional position in the data range to a number of color steps.
    The logarithmic and exponential curves are kept exactly as first written;
    they have never been calibrated as perceptual scales.
    """
    LINEAR, LOGARITHMIC, EXPONENTIAL = 'linear', 'logarithmic', 'exponential'

    def steps_for(self, percent: float, distance: int) -> int:
        if self == ColorScale.LOGARITHMIC:
            return round_half_up((distance / math.log10(2)) * math.log10(percent + 1))
        elif self == ColorScale.EXPONENTIAL:
            return round_half_up(math.pow(10, percent * math.log10(distance + 1)) - 1)
        return math.floor(percent * distance)

    @classmethod
    def from_str(cls, scale: str):
        return cls(scale.lower())


def color_value_distance(low, high) -> int:
    """How many single-unit channel steps separate two colors."""
    return sum(abs(a - b) for a, b in zip(Color.to_rgb(low), Color.to_rgb(high)))


def walk_color(low: RGB, high: RGB, steps: int) -> RGB:
    """
    Moves from low toward high one channel unit per step,
    always on the channel furthest from high (R, then G, then B on ties).
    """
    rgb = list(low)
    for _ in range(steps):
        dists = [c - h for c, h in zip(rgb, high)]
        ch = max(range(3), key=lambda i: abs(dists[i]))
        if dists[ch] == 0:
            break
        rgb[ch] += 1 if dists[ch] < 0 else -1
    return rgb[0], rgb[1], rgb[2]


def color_for(value: float, z_min: float, z_max: float, low, high, distance: int,
              scale: ColorScale = ColorScale.LINEAR) -> RGB:
    """Color of one heat map cell. A single-valued range maps everything to the low color."""
    z_range = z_max - z_min
    percent = (value - z_min) / z_range if z_range else 0.0
    return walk_color(Color.to_rgb(low), Color.to_rgb(high), scale.steps_for(percent, distance))


def format_value(value: float, precision: int) -> str:
    """
    Rounds to `precision` significant figures, half-up, in plain decimal notation.
    A precision of 0 keeps every digit of the binary value.
    """
    if precision < 0:
        raise ValueError(f'Precision must be at least 0 significant figures: {precision}')
    if precision == 0:
        d = Decimal(float(value))
    else:
        d = Context(prec=precision, rounding=ROUND_HALF_UP).create_decimal_from_float(float(value))
    if d.is_zero():
        d = abs(d)
    return f'{d:f}'


def fit_text(text: str, font: FontDef, min_font_size: int, target: int, measure: Measure,
             extent: Callable[[TextMetrics], int]) -> tuple[FontDef, TextMetrics]:
    """
    Shrinks the font one size at a time until the text's extent fits the target
    or the font reaches the minimum size, which may still not fit.
    """
    metrics = measure(font, text)
    while extent(metrics) > target and font.size > min_font_size:
        font = font.resized(font.size - 1)
        metrics = measure(font, text)
    return font, metrics


def fit_to_width(text: str, font: FontDef, min_font_size: int, target_w: int,
                 measure: Measure = measure_text):
    return fit_text(text, font, min_font_size, target_w, measure, lambda m: m.width)


def fit_to_height(text: str, font: FontDef, min_font_size: int, target_h: int,
                  measure: Measure = measure_text, rotated=False):
    """Fits the vertical extent: the line height, or the run length of text turned on its side."""
    return fit_text(text, font, min_font_size, target_h, measure,
                    (lambda m: m.width) if rotated else (lambda m: m.height))


@dataclass(frozen=True)
class AxisMapping:
    """Maps a cell index along an axis to the value it represents."""
    offset: float = 0.0
    interval: float = 1.0

    def value_at(self, i: int) -> float:
        return self.offset + i * self.interval


def grid_shape(z_values) -> WH:
    """(x cells, y cells) of a grid of rows, which must be rectangular."""
    if len(z_values) == 0 or len(z_values[0]) == 0:
        raise ValueError('z-values need at least one row and one column')
    n_x = len(z_values[0])
    for y, row in enumerate(z_values):
        if len(row) != n_x:
            raise ValueError(f'z-values row {y} has {len(row)} cells, expected {n_x}')
    return n_x, len(z_values)


def grid_range(z_values) -> tuple[float, float]:
    return min(min(row) for row in z_values), max(max(row) for row in z_values)


def tick_indices(n_cells: int, interval: int) -> range:
    """Cell indices that get an axis value: every interval-th from the first."""
    return range(0, n_cells, interval)


# ----------------------3. Layout----------------------------


@dataclass(frozen=True)
class ChartLayout:
    """
    Pixel geometry of every chart region, resolved without circularity:
    title, then axis labels, then axis value bands, then heat map cells, then axis bars.
    Computed fresh on each render.
    """
    width: int
    height: int
    margin: int
    axis_thickness: int
    flexible_size: bool
    n_x: int
    n_y: int
    cell_w: int
    cell_h: int
    title_w: int = 0
    title_h: int = 0
    title_ascent: int = 0
    x_label_w: int = 0
    x_label_h: int = 0
    x_label_ascent: int = 0
    y_label_w: int = 0
    """line height of the rotated y-axis label"""
    y_label_h: int = 0
    """run length of the rotated y-axis label"""
    y_label_descent: int = 0
    x_values_h: int = 0
    y_values_w: int = 0

    @classmethod
    def make(cls, chart, measure: Measure = measure_text):
        n_x, n_y = grid_shape(chart.z_values)
        no_text = TextMetrics(0, 0, 0)
        title = measure(chart.title_font, chart.title) if chart.title else no_text
        x_label = measure(chart.axis_labels_font, chart.x_axis_label) if chart.x_axis_label else no_text
        y_label = measure(chart.axis_labels_font, chart.y_axis_label) if chart.y_axis_label else no_text
        # Axis values shrink per value to fit their cell, so reserve their full size
        values_h = measure(chart.axis_values_font, '').height
        x_values_h = values_h if chart.show_x_axis_values else 0
        y_values_w = values_h if chart.show_y_axis_values else 0

        m, axis = chart.margin, chart.axis_thickness
        avail_w = chart.width - 2 * m - y_label.height - y_values_w
        avail_h = chart.height - 2 * m - title.height - x_label.height - x_values_h
        if avail_w <= 0 or avail_h <= 0:
            raise ValueError(f'No room for the heat map in a {chart.width}x{chart.height} chart:'
                             f' {avail_w}x{avail_h} pixels left after margins, title, labels and axis values')
        cell_w, cell_h = avail_w // n_x, avail_h // n_y
        if cell_w == 0 or cell_h == 0:
            raise ValueError(f'{n_x}x{n_y} cells do not fit in {avail_w}x{avail_h} heat map pixels')
        return cls(width=chart.width, height=chart.height, margin=m, axis_thickness=axis,
                   flexible_size=chart.flexible_size, n_x=n_x, n_y=n_y, cell_w=cell_w, cell_h=cell_h,
                   title_w=title.width, title_h=title.height, title_ascent=title.ascent,
                   x_label_w=x_label.width, x_label_h=x_label.height, x_label_ascent=x_label.ascent,
                   y_label_w=y_label.height, y_label_h=y_label.width, y_label_descent=y_label.descent,
                   x_values_h=x_values_h, y_values_w=y_values_w)

    @property
    def heat_w(self):
        return self.cell_w * self.n_x

    @property
    def heat_h(self):
        return self.cell_h * self.n_y

    @property
    def y_axis_x(self):
        """left edge of the y-axis bar"""
        return self.margin + self.y_label_w + self.y_values_w

    @property
    def heat_x(self):
        return self.y_axis_x + self.axis_thickness

    @property
    def heat_y(self):
        return self.margin + self.title_h

    @property
    def heat_bounds(self) -> Box:
        return self.heat_x, self.heat_y, self.heat_w, self.heat_h

    def cell_bounds(self, x: int, y: int) -> Box:
        return self.heat_x + x * self.cell_w, self.heat_y + y * self.cell_h, self.cell_w, self.cell_h

    @property
    def y_axis_bounds(self) -> Box:
        return self.y_axis_x, self.heat_y, self.axis_thickness, self.heat_h

    @property
    def x_axis_bounds(self) -> Box:
        return self.y_axis_x, self.heat_y + self.heat_h, self.heat_w + self.axis_thickness, self.axis_thickness

    @property
    def x_values_bounds(self) -> Box:
        return self.heat_x, self.heat_y + self.heat_h + self.axis_thickness, self.heat_w, self.x_values_h

    @property
    def y_values_bounds(self) -> Box:
        return self.margin + self.y_label_w, self.heat_y, self.y_values_w, self.heat_h

    @property
    def x_label_bounds(self) -> Box:
        x0, y0, _, dy = self.x_values_bounds
        return x0 + self.heat_w // 2 - self.x_label_w // 2, y0 + dy, self.x_label_w, self.x_label_h

    @property
    def y_label_bounds(self) -> Box:
        return self.margin, self.heat_y + self.heat_h // 2 - self.y_label_h // 2, self.y_label_w, self.y_label_h

    @property
    def content_w(self):
        return 2 * self.margin + self.y_label_w + self.y_values_w + self.axis_thickness + self.heat_w

    @property
    def content_h(self):
        return (2 * self.margin + self.title_h + self.heat_h + self.axis_thickness
                + self.x_values_h + self.x_label_h)

    @property
    def canvas_wh(self) -> WH:
        """
        Final image size: the content bounds when flexible, otherwise as requested.
        Axis bars sit in the margin, so content may reach past the requested size by their thickness.
        """
        if self.flexible_size:
            return (min(self.width, max(self.content_w, self.title_w + 2 * self.margin)),
                    min(self.height, self.content_h))
        return self.width, self.height

    @property
    def title_bounds(self) -> Box:
        """Centered over the final canvas, within the top margin plus title height."""
        canvas_w, _ = self.canvas_wh
        y_base = (self.margin + self.title_h) // 2 + self.title_ascent // 2
        return canvas_w // 2 - self.title_w // 2, y_base - self.title_ascent, self.title_w, self.title_h


# ----------------------4. Drawing Surfaces----------------------------


class Out:
    def __init__(self, r):
        self.r = r
    def draw_box(self, x0, y0, dx, dy, col, width=1): pass
    def fill_rect(self, x0, y0, dx, dy, col): pass
    def draw_text(self, x_left, y_base, symbol: str, font: FontDef, color): pass
    def draw_text_rotated(self, x_base, y_start, symbol: str, font: FontDef, color): pass


class RasterOut(Out):
    r: ImageDraw.ImageDraw = None

    def __init__(self, r, image: Image.Image = None):
        super().__init__(r)
        self.image = image

    @classmethod
    def for_image(cls, i: Image.Image):
        return cls(ImageDraw.Draw(i), i)

    def draw_box(self, x0, y0, dx, dy, col, width=1):
        self.r.rectangle((x0, y0, x0 + dx - 1, y0 + dy - 1), outline=Color.to_pil(col), width=width)

    def fill_rect(self, x0, y0, dx, dy, col):
        if dx > 0 and dy > 0:
            self.r.rectangle((x0, y0, x0 + dx - 1, y0 + dy - 1), fill=Color.to_pil(col))

    def draw_text(self, x_left, y_base, symbol: str, font: FontDef, color):
        self.r.text((x_left, y_base), symbol, font=font.to_pil(), fill=Color.to_pil(color), anchor='ls')

    def draw_text_rotated(self, x_base, y_start, symbol: str, font: FontDef, color):
        """Text turned 270°, reading upward from (x_base, y_start) on its baseline."""
        pil_font = font.to_pil()
        ascent, descent = pil_font.getmetrics()
        run_w = math.ceil(pil_font.getlength(symbol)) + 1
        mask = Image.new('L', (run_w, ascent + descent))
        ImageDraw.Draw(mask).text((0, ascent), symbol, font=pil_font, fill=FF, anchor='ls')
        mask = mask.rotate(90, expand=True)
        x0, y0 = x_base - ascent, y_start - run_w + 1
        self.image.paste(Color.to_pil(color), (x0, y0, x0 + mask.width, y0 + mask.height), mask)


class SVGOut(Out):
    r: svg.Drawing = None

    @classmethod
    def for_drawing(cls, i: svg.Drawing):
        return cls(i)

    @staticmethod
    def font_attrs(font: FontDef):
        font_family, _ = font.to_pil().getname()
        return {'font_family': font_family, 'font_weight': 'bold' if font.style == FontStyle.BOLD else None}

    def draw_box(self, x0, y0, dx, dy, col, width=1):
        self.r.append(svg.Rectangle(x0, y0, dx, dy, fill='none', stroke=Color.to_str(col), stroke_width=width))

    def fill_rect(self, x0, y0, dx, dy, col):
        if dx > 0 and dy > 0:
            self.r.append(svg.Rectangle(x0, y0, dx, dy, fill=Color.to_str(col)))

    def draw_text(self, x_left, y_base, symbol: str, font: FontDef, color):
        self.r.append(svg.Text(symbol, font.size, x_left, y_base, fill=Color.to_str(color),
                               **self.font_attrs(font)))

    def draw_text_rotated(self, x_base, y_start, symbol: str, font: FontDef, color):
        self.r.append(svg.Text(symbol, font.size, x_base, y_start, fill=Color.to_str(color),
                               transform=f'rotate(-90, {x_base}, {y_start})', **self.font_attrs(font)))


# ----------------------5. Rendering----------------------------


@dataclass(frozen=True)
class Renderer:
    r: Out = None
    chart: 'Chart' = None
    layout: ChartLayout = None
    measure: Measure = measure_text

    @classmethod
    def to_image(cls, i, chart, layout: ChartLayout, measure: Measure = measure_text):
        out = None
        if isinstance(i, Image.Image):
            out = RasterOut.for_image(i)
        elif isinstance(i, svg.Drawing):
            out = SVGOut.for_drawing(i)
        return cls(out, chart, layout, measure)

    def render(self):
        """Paints every chart element, in an order where later elements overlay earlier ones."""
        self.draw_background()
        self.draw_title()
        self.draw_heat_map()
        self.draw_x_label()
        self.draw_y_label()
        self.draw_axis_bars()
        self.draw_x_values()
        self.draw_y_values()
        if DEBUG:
            self.draw_bounds()

    def draw_background(self):
        lo = self.layout
        self.r.fill_rect(0, 0, lo.width, lo.height, self.chart.bg)

    def draw_title(self):
        c, lo = self.chart, self.layout
        if not c.title:
            return
        x_left, y_top, _, _ = lo.title_bounds
        self.r.draw_text(x_left, y_top + lo.title_ascent, c.title, c.title_font, c.title_color)

    def draw_heat_map(self):
        c, lo = self.chart, self.layout
        z_min, z_max = grid_range(c.z_values)
        low, high = Color.to_rgb(c.low_value_color), Color.to_rgb(c.high_value_color)
        distance = c.color_value_distance
        for y, row in enumerate(c.z_values):
            for x, z in enumerate(row):
                col = color_for(z, z_min, z_max, low, high, distance, c.color_scale)
                self.r.fill_rect(*lo.cell_bounds(x, y), col)

    def draw_x_label(self):
        c, lo = self.chart, self.layout
        if not c.x_axis_label:
            return
        x_left, y_top, _, _ = lo.x_label_bounds
        self.r.draw_text(x_left, y_top + lo.x_label_ascent, c.x_axis_label, c.axis_labels_font, c.axis_label_color)

    def draw_y_label(self):
        c, lo = self.chart, self.layout
        if not c.y_axis_label:
            return
        x0, y_top, dx, dy = lo.y_label_bounds
        self.r.draw_text_rotated(x0 + dx - lo.y_label_descent, y_top + dy,
                                 c.y_axis_label, c.axis_labels_font, c.axis_label_color)

    def draw_axis_bars(self):
        c, lo = self.chart, self.layout
        if c.axis_thickness > 0:
            self.r.fill_rect(*lo.x_axis_bounds, c.axis_color)
            self.r.fill_rect(*lo.y_axis_bounds, c.axis_color)

    def draw_x_values(self):
        """Each value centered under its column, shrunk to fit the column width."""
        c, lo = self.chart, self.layout
        if not c.show_x_axis_values:
            return
        _, y_top, _, _ = lo.x_values_bounds
        x_axis = c.x_axis
        for i in tick_indices(lo.n_x, c.x_axis_values_interval):
            value_str = format_value(x_axis.value_at(i), c.x_axis_values_precision)
            font, metrics = fit_to_width(value_str, c.axis_values_font, c.axis_values_min_font_size,
                                         lo.cell_w, self.measure)
            x_left = lo.heat_x + i * lo.cell_w + lo.cell_w // 2 - metrics.width // 2
            self.r.draw_text(x_left, y_top + metrics.ascent, value_str, font, c.axis_values_color)

    def draw_y_values(self):
        """Each value turned on its side and centered against its row, shrunk to fit the row height."""
        c, lo = self.chart, self.layout
        if not c.show_y_axis_values:
            return
        x0, _, dx, _ = lo.y_values_bounds
        y_axis = c.y_axis
        # top-down, so each value stays beside its own data row
        for i in tick_indices(lo.n_y, c.y_axis_values_interval):
            value_str = format_value(y_axis.value_at(i), c.y_axis_values_precision)
            font, metrics = fit_to_height(value_str, c.axis_values_font, c.axis_values_min_font_size,
                                          lo.cell_h, self.measure, rotated=True)
            y_start = lo.heat_y + i * lo.cell_h + lo.cell_h // 2 + metrics.width // 2
            self.r.draw_text_rotated(x0 + dx - metrics.descent, y_start, value_str, font, c.axis_values_color)

    def draw_bounds(self):
        lo = self.layout
        for box in (lo.title_bounds, lo.x_label_bounds, lo.y_label_bounds,
                    lo.x_values_bounds, lo.y_values_bounds, lo.heat_bounds):
            if box[2] > 0 and box[3] > 0:
                self.r.draw_box(*box, Color.GREY)


# ----------------------6. Charts----------------------------


class OutFormat(Enum):
    RASTER, SVG = 'raster', 'svg'

    @classmethod
    def for_filename(cls, filename: str):
        """Vector output for .svg, raster otherwise; the raster codec follows the extension."""
        ext = os.path.splitext(filename)[1]
        if not ext or ext == '.':
            raise ValueError(f'Illegal filename, no extension used: {filename}')
        return cls.SVG if ext.lower() == '.svg' else cls.RASTER


@dataclass
class Chart:
    """
    A heat chart of z-values, where z_values[y][x] is drawn as the cell at column x, row y.
    Every setting may be changed between renders; each render works from a snapshot.
    """
    z_values: list[list[float]]
    x_offset: float = 0.0
    y_offset: float = 0.0
    x_interval: float = 1.0
    y_interval: float = 1.0

    width: int = 800
    height: int = 400
    margin: int = 20
    flexible_size: bool = True
    """Crop the image to the space actually used, instead of keeping the requested size."""
    bg: Color = Color.WHITE

    title: str = None
    title_font: FontDef = FontDef(16, FontStyle.BOLD)
    title_color: Color = Color.BLACK

    axis_thickness: int = 2
    axis_color: Color = Color.BLACK
    axis_labels_font: FontDef = FontDef(12)
    axis_label_color: Color = Color.BLACK
    x_axis_label: str = None
    y_axis_label: str = None
    axis_values_color: Color = Color.BLACK
    axis_values_font: FontDef = FontDef(10)
    """largest font size for axis values; each value may shrink to fit its cell"""
    axis_values_min_font_size: int = 7
    x_axis_values_interval: int = 1
    y_axis_values_interval: int = 1
    x_axis_values_precision: int = 4
    """significant figures"""
    y_axis_values_precision: int = 4
    show_x_axis_values: bool = True
    show_y_axis_values: bool = True

    high_value_color: Color = Color.BLACK
    low_value_color: Color = Color.WHITE
    color_scale: ColorScale = ColorScale.LINEAR

    COLOR_KEYS = ('bg', 'title_color', 'axis_color', 'axis_label_color', 'axis_values_color',
                  'high_value_color', 'low_value_color')
    FONT_KEYS = ('title_font', 'axis_labels_font', 'axis_values_font')

    @property
    def x_axis(self) -> AxisMapping:
        return AxisMapping(self.x_offset, self.x_interval)

    @property
    def y_axis(self) -> AxisMapping:
        return AxisMapping(self.y_offset, self.y_interval)

    @property
    def color_value_distance(self) -> int:
        return color_value_distance(self.low_value_color, self.high_value_color)

    def check(self):
        grid_shape(self.z_values)
        if self.width < 1 or self.height < 1:
            raise ValueError(f'Chart size must be positive: {self.width}x{self.height}')
        if self.margin < 0 or self.axis_thickness < 0:
            raise ValueError(f'Margin and axis thickness cannot be negative: {self.margin}, {self.axis_thickness}')
        for axis, interval in (('x', self.x_axis_values_interval), ('y', self.y_axis_values_interval)):
            if interval < 1:
                raise ValueError(f'{axis}-axis values interval must be at least 1: {interval}')
        for axis, precision in (('x', self.x_axis_values_precision), ('y', self.y_axis_values_precision)):
            if precision < 0:
                raise ValueError(f'{axis}-axis values precision cannot be negative: {precision}')
        if self.axis_values_min_font_size < 1:
            raise ValueError(f'Axis values minimum font size must be at least 1: {self.axis_values_min_font_size}')

    def render(self, out_format: OutFormat = OutFormat.RASTER, measure: Measure = measure_text):
        chart = replace(self)
        chart.check()
        layout = ChartLayout.make(chart, measure)
        img = image_for_rendering(chart, out_format, layout.width, layout.height)
        Renderer.to_image(img, chart, layout, measure).render()
        return crop_to_size(img, *layout.canvas_wh)

    def render_to_buffer(self) -> Image.Image:
        return self.render(OutFormat.RASTER)

    def render_to_file(self, filename: str):
        out_format = OutFormat.for_filename(filename)
        save_image(self.render(out_format), filename)

    @classmethod
    def from_dict(cls, chart_def: dict):
        chart_def = dict(chart_def)
        for key in cls.COLOR_KEYS:
            if key in chart_def:
                chart_def[key] = Color.from_def(chart_def[key])
        for key in cls.FONT_KEYS:
            if key in chart_def:
                chart_def[key] = FontDef.from_dict(chart_def[key])
        if 'color_scale' in chart_def:
            chart_def['color_scale'] = ColorScale.from_str(chart_def['color_scale'])
        return cls(**chart_def)

    @classmethod
    def from_toml_file(cls, toml_filename: str):
        return cls.from_dict(toml.load(toml_filename))

    example_dir_path = os.path.join(os.path.dirname(os.path.realpath(__file__)), 'examples')

    @classmethod
    def from_example(cls, example_name: str):
        return cls.from_toml_file(os.path.join(cls.example_dir_path, f'Chart-{example_name}.toml'))

    @classmethod
    def example_names(cls):
        for fn in os.listdir(cls.example_dir_path):
            if match := re.match(r'Chart-(.*)\.toml$', fn):
                yield match.group(1)


# ----------------------7. Output----------------------------


def image_for_rendering(chart: Chart, out_format: OutFormat, w: int, h: int):
    if out_format == OutFormat.RASTER:
        return Image.new('RGB', (w, h), Color.to_pil(chart.bg))
    elif out_format == OutFormat.SVG:
        return svg.Drawing(w, h)


def crop_to_size(img, w: int, h: int):
    """Keeps the top-left w x h of the image, discarding any unused space."""
    assert w > 0
    assert h > 0
    if isinstance(img, Image.Image):
        return img if img.size == (w, h) else img.crop((0, 0, w, h))
    elif isinstance(img, svg.Drawing):
        if (img.width, img.height) == (w, h):
            return img
        dst_img = svg.Drawing(w, h)
        for elem in img.elements:
            dst_img.append(elem)
        return dst_img


def save_image(img_to_save, filename: str):
    if isinstance(img_to_save, Image.Image):
        img_to_save.save(filename)
    elif isinstance(img_to_save, svg.Drawing):
        img_to_save.save_svg(filename)
