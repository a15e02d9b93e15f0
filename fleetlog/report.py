"""Report view: the dashboard plus full record tables as a tree of drawable blocks.

``build_report`` decides *what* is shown, ``rasterize`` paints the blocks onto a
Pillow image one under the other. Coordinates are logical pixels; the painter
multiplies everything by the raster scale.
"""
from dataclasses import dataclass

from PIL import Image, ImageDraw, ImageFont

from fleetlog import formatting
from fleetlog.aggregation import summarize
from fleetlog.records import EXPENSE, TRUCK

PAGE_WIDTH_PX = 794  # A4 width at 96 dpi
RASTER_SCALE = 2
CHART_ANIMATION_MS = 1500

BACKGROUND = "#0f172a"
SURFACE = "#1e293b"
BORDER = "#334155"
TEXT = "#f8fafc"
MUTED = "#94a3b8"
GRID = "#475569"
PRIMARY = "#0284c7"
FUEL = "#38bdf8"
EXPENSE_LINE = "#f43f5e"
COLORS = ("#0284c7", "#0ea5e9", "#38bdf8", "#7dd3fc", "#a5f3fc")

MARGIN = 24
GAP = 16

REPORT_TITLE = "Relatório de Performance da Frota"
REPORT_SUBTITLE = "Análise Consolidada de Operações e Custos"
FOOTER_TEXT = "Relatório gerado pelo Sistema de Gestão de Frotas"
EMPTY_TABLE = "Nenhum dado encontrado."


class Painter:
    def __init__(self, image, scale):
        self.draw = ImageDraw.Draw(image)
        self.scale = scale
        self._fonts = {}

    def font(self, size):
        if size not in self._fonts:
            self._fonts[size] = ImageFont.load_default(size=max(1, int(size * self.scale)))
        return self._fonts[size]

    def _px(self, *values):
        return [int(round(v * self.scale)) for v in values]

    def rect(self, x0, y0, x1, y1, fill=None, outline=None):
        self.draw.rectangle(self._px(x0, y0, x1, y1), fill=fill, outline=outline,
                            width=max(1, int(self.scale)))

    def line(self, points, fill, width=1):
        flat = self._px(*[c for pt in points for c in pt])
        self.draw.line(flat, fill=fill, width=max(1, int(width * self.scale)))

    def dot(self, x, y, r, fill):
        self.draw.ellipse(self._px(x - r, y - r, x + r, y + r), fill=fill)

    def pieslice(self, box, start, end, fill):
        self.draw.pieslice(self._px(*box), start, end, fill=fill)

    def text_width(self, text, size):
        return self.draw.textlength(text, font=self.font(size)) / self.scale

    def fit(self, text, width, size):
        if self.text_width(text, size) <= width:
            return text
        while text and self.text_width(text + "…", size) > width:
            text = text[:-1]
        return text + "…"

    def text(self, x, y, text, size=12, fill=TEXT, align="left", width=None):
        if width is not None:
            text = self.fit(text, width, size)
            if align == "right":
                x += width - self.text_width(text, size)
            elif align == "center":
                x += (width - self.text_width(text, size)) / 2
        self.draw.text(self._px(x, y), text, fill=fill, font=self.font(size))


class Block:
    height = 0
    animation_ms = 0

    def paint(self, p, x, y, width):
        raise NotImplementedError


@dataclass
class Header(Block):
    title: str
    subtitle: str
    issued: str
    height: int = 96

    def paint(self, p, x, y, width):
        p.rect(x, y, x + width, y + self.height, fill=SURFACE)
        p.rect(x, y + self.height - 2, x + width, y + self.height, fill=BORDER)
        p.rect(x + 20, y + 26, x + 60, y + 66, fill=PRIMARY)
        p.text(x + 76, y + 24, self.title, size=20, width=width - 260)
        p.text(x + 76, y + 54, self.subtitle, size=12, fill=MUTED, width=width - 260)
        p.text(x + width - 180, y + 30, "Data de Emissão", size=12, align="right", width=160)
        p.text(x + width - 180, y + 52, self.issued, size=10, fill=MUTED, align="right", width=160)


@dataclass
class Heading(Block):
    text: str
    height: int = 40

    def paint(self, p, x, y, width):
        p.text(x, y + 4, self.text, size=24, width=width)


@dataclass
class SectionTitle(Block):
    text: str
    height: int = 36

    def paint(self, p, x, y, width):
        p.rect(x, y + 4, x + 4, y + 30, fill=PRIMARY)
        p.text(x + 14, y + 8, self.text, size=16, width=width - 14)


@dataclass
class StatCards(Block):
    cards: tuple
    height: int = 92

    def paint(self, p, x, y, width):
        gap = 12
        n = max(1, len(self.cards))
        card_w = (width - gap * (n - 1)) / n
        for i, (title, value) in enumerate(self.cards):
            cx = x + i * (card_w + gap)
            p.rect(cx, y, cx + card_w, y + self.height, fill=SURFACE)
            p.text(cx + 12, y + 14, title.upper(), size=9, fill=MUTED, width=card_w - 24)
            p.text(cx + 12, y + 44, value, size=18, width=card_w - 24)


@dataclass
class Notice(Block):
    title: str
    hint: str
    height: int = 110

    def paint(self, p, x, y, width):
        p.rect(x, y, x + width, y + self.height, fill=SURFACE)
        p.text(x, y + 34, self.title, size=16, align="center", width=width)
        p.text(x, y + 62, self.hint, size=12, fill=MUTED, align="center", width=width)


@dataclass
class Controls(Block):
    filters: dict
    placeholder: str = "Pesquisar..."
    height: int = 44

    def paint(self, p, x, y, width):
        active = ", ".join(f"{k}={v}" for k, v in self.filters.items()) or "nenhum"
        p.text(x, y + 4, f"Filtros: {active}", size=11, fill=MUTED, width=width)
        p.rect(x, y + 20, x + width / 3, y + 42, fill=SURFACE, outline=BORDER)
        p.text(x + 8, y + 24, self.placeholder, size=11, fill=MUTED, width=width / 3 - 16)


def _value_range(values):
    lo, hi = min([0.0, *values]), max([0.0, *values])
    if hi == lo:
        hi = lo + 1
    return lo, hi


@dataclass
class Chart(Block):
    title: str
    labels: tuple
    height: int = 300
    animation_ms: int = 0

    def plot_box(self, x, y, width):
        return x + 64, y + 44, x + width - 16, y + self.height - 48

    def frame(self, p, x, y, width, lo, hi):
        p.rect(x, y, x + width, y + self.height, fill=SURFACE)
        p.text(x + 16, y + 12, self.title, size=14, width=width - 32)
        left, top, right, bottom = self.plot_box(x, y, width)
        for k in range(5):
            value = lo + (hi - lo) * k / 4
            gy = bottom - (bottom - top) * k / 4
            p.line([(left, gy), (right, gy)], fill=GRID)
            p.text(x + 4, gy - 6, formatting.number(value, 0), size=9, fill=MUTED,
                   align="right", width=left - x - 10)
        slot = (right - left) / max(1, len(self.labels))
        for i, label in enumerate(self.labels):
            p.text(left + i * slot, bottom + 6, label, size=9, fill=MUTED, align="center", width=slot)
        return left, top, right, bottom, slot

    def legend(self, p, x, y, width, entries):
        lx = x + 64
        for name, color in entries:
            p.rect(lx, y + self.height - 22, lx + 10, y + self.height - 12, fill=color)
            p.text(lx + 16, y + self.height - 24, name, size=10, fill=TEXT)
            lx += 26 + p.text_width(name, 10)


@dataclass
class BarChart(Chart):
    values: tuple = ()
    name: str = ""
    color: str = PRIMARY

    def paint(self, p, x, y, width):
        lo, hi = _value_range(self.values)
        left, top, right, bottom, slot = self.frame(p, x, y, width, lo, hi)

        def to_y(v):
            return bottom - (v - lo) / (hi - lo) * (bottom - top)

        for i, value in enumerate(self.values):
            bx = left + i * slot + slot * 0.2
            y0, y1 = sorted((to_y(0.0), to_y(value)))
            p.rect(bx, y0, bx + slot * 0.6, y1, fill=self.color)
        self.legend(p, x, y, width, [(self.name, self.color)])


@dataclass
class LineChart(Chart):
    series: tuple = ()

    def paint(self, p, x, y, width):
        lo, hi = _value_range([v for _, _, values in self.series for v in values])
        left, top, right, bottom, slot = self.frame(p, x, y, width, lo, hi)
        for _, color, values in self.series:
            points = [(left + slot * (i + 0.5), bottom - (v - lo) / (hi - lo) * (bottom - top))
                      for i, v in enumerate(values)]
            if len(points) > 1:
                p.line(points, fill=color, width=2)
            for px, py in points:
                p.dot(px, py, 3, fill=color)
        self.legend(p, x, y, width, [(name, color) for name, color, _ in self.series])


@dataclass
class PieChart(Chart):
    values: tuple = ()

    def paint(self, p, x, y, width):
        p.rect(x, y, x + width, y + self.height, fill=SURFACE)
        p.text(x + 16, y + 12, self.title, size=14, width=width - 32)
        total = sum(v for v in self.values if v > 0)
        if total <= 0:
            p.text(x, y + self.height / 2, EMPTY_TABLE, size=12, fill=MUTED, align="center", width=width)
            return
        radius = (self.height - 80) / 2
        cx, cy = x + 40 + radius, y + 44 + radius
        start = -90.0
        lx, ly = cx + radius + 40, y + 52
        for i, (name, value) in enumerate(zip(self.labels, self.values)):
            color = COLORS[i % len(COLORS)]
            if value > 0:
                sweep = 360.0 * value / total
                p.pieslice((cx - radius, cy - radius, cx + radius, cy + radius), start, start + sweep, color)
                start += sweep
            if ly < y + self.height - 20:
                p.rect(lx, ly + 2, lx + 10, ly + 12, fill=color)
                pct = max(value, 0) / total * 100
                p.text(lx + 16, ly, f"{name} {pct:.0f}%", size=10, width=x + width - lx - 32)
                ly += 18


@dataclass
class Table(Block):
    columns: tuple
    rows: tuple
    empty_text: str = EMPTY_TABLE
    header_h: int = 32
    row_h: int = 28

    @property
    def height(self):
        if not self.rows:
            return self.header_h + 60
        return self.header_h + len(self.rows) * self.row_h + 8

    def paint(self, p, x, y, width):
        p.rect(x, y, x + width, y + self.height, fill=SURFACE)
        p.rect(x, y, x + width, y + self.header_h, fill=BORDER)
        total = sum(c.weight for c in self.columns) or 1
        widths = [width * c.weight / total for c in self.columns]
        cx = x
        for col, w in zip(self.columns, widths):
            p.text(cx + 8, y + 9, col.title, size=11, align=col.align, width=w - 16)
            cx += w
        if not self.rows:
            p.text(x, y + self.header_h + 22, self.empty_text, size=12, fill=MUTED,
                   align="center", width=width)
            return
        ry = y + self.header_h
        for row in self.rows:
            cx = x
            for col, w, cell in zip(self.columns, widths, row):
                p.text(cx + 8, ry + 8, str(cell), size=10, align=col.align, width=w - 16)
                cx += w
            ry += self.row_h
            p.line([(x, ry), (x + width, ry)], fill=BORDER)


@dataclass
class Footer(Block):
    text: str = FOOTER_TEXT
    height: int = 44

    def paint(self, p, x, y, width):
        p.rect(x, y, x + width, y + 2, fill=BORDER)
        p.text(x, y + 18, self.text, size=11, fill=MUTED, align="center", width=width)


@dataclass(frozen=True)
class ReportTree:
    blocks: tuple
    report_mode: bool = True

    @property
    def is_empty(self):
        return not self.blocks

    @property
    def settle_ms(self):
        return max((b.animation_ms for b in self.blocks), default=0)

    @property
    def height(self):
        if not self.blocks:
            return 0
        return 2 * MARGIN + sum(b.height for b in self.blocks) + GAP * (len(self.blocks) - 1)


def dashboard_blocks(summary, report_mode=False):
    blocks = [Heading("Dashboard")]
    if summary.is_empty:
        blocks.append(Notice("Nenhum dado encontrado para os filtros aplicados",
                             "Tente limpar os filtros ou adicione novos registros."))
        return blocks
    animation = 0 if report_mode else CHART_ANIMATION_MS
    months = tuple(m.month for m in summary.monthly_data)
    blocks.append(StatCards((
        ("KM Rodados (Total)", formatting.km(summary.total_km)),
        ("Custo de Combustível (Total)", formatting.currency(summary.total_fuel_cost)),
        ("Despesas (Total)", formatting.currency(summary.total_expenses)),
        ("Média Geral de Consumo", formatting.km_per_liter(summary.overall_avg_km_l)),
    )))
    blocks.append(BarChart("Desempenho Mensal", months, animation_ms=animation,
                           values=tuple(m.km for m in summary.monthly_data), name="KM Rodados"))
    blocks.append(LineChart("Custos Mensais (Combustível vs. Despesas)", months, animation_ms=animation,
                            series=(("Combustível (R$)", FUEL, tuple(m.fuel for m in summary.monthly_data)),
                                    ("Despesas (R$)", EXPENSE_LINE,
                                     tuple(m.expense for m in summary.monthly_data)))))
    blocks.append(PieChart("Despesas por Fornecedor",
                           tuple(c.name for c in summary.expense_by_category), animation_ms=animation,
                           values=tuple(c.value for c in summary.expense_by_category)))
    return blocks


def _table(kind, records, report_mode):
    return Table(tuple(kind.columns(report_mode)),
                 tuple(tuple(kind.row(r, report_mode)) for r in records))


def build_report(truck_logs, expenses, report_mode=True, issued=None, filters=None):
    """Dashboard and detail tables for exactly the records given."""
    blocks = [Header(REPORT_TITLE, REPORT_SUBTITLE, formatting.long_date(issued))]
    blocks += dashboard_blocks(summarize(truck_logs, expenses), report_mode)
    for title, kind, records in (("Detalhes das Viagens", TRUCK, truck_logs),
                                 ("Detalhes das Despesas", EXPENSE, expenses)):
        blocks.append(SectionTitle(title))
        if not report_mode:
            blocks.append(Controls(dict(filters or {})))
        blocks.append(_table(kind, records, report_mode))
    blocks.append(Footer())
    return ReportTree(tuple(blocks), report_mode)


def rasterize(tree, width=PAGE_WIDTH_PX, scale=RASTER_SCALE, background=BACKGROUND):
    if tree.is_empty:
        raise ValueError("nothing to rasterize")
    image = Image.new("RGB", (int(width * scale), int(tree.height * scale)), background)
    painter = Painter(image, scale)
    y = MARGIN
    for block in tree.blocks:
        block.paint(painter, MARGIN, y, width - 2 * MARGIN)
        y += block.height + GAP
    return image
