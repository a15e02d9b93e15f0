"""Image-based PDF export of the report view.

The report tree is mounted on a render target, rasterized once and the tall
raster is laid onto A4 pages: page ``i`` shows the same image shifted up by
``i`` page heights. Text is not selectable; charts come out exactly as drawn.

Synchronization bound: a target is captured once it is mounted, non-empty and
its chart animations are over, followed by ``SETTLE_DELAY`` seconds. Report
mode sets animation to zero, so the wait is the settle delay alone.
"""
import io
import logging
import math
import os
import threading
import time
from datetime import date

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from fleetlog import config
from fleetlog.errors import ExportFailure, FleetError, RenderTargetMissing
from fleetlog.report import BACKGROUND, PAGE_WIDTH_PX, RASTER_SCALE, build_report, rasterize

log = logging.getLogger(__name__)

TARGET_ID = "pdf-render-target"
SETTLE_DELAY = 0.1
WAIT_BUDGET = 2.0
POLL_INTERVAL = 0.02


class RenderTarget:
    def __init__(self, target_id, tree, clock=time.monotonic):
        self.id = target_id
        self.tree = tree
        self.mounted_at = clock()
        self.settled_at = self.mounted_at + (tree.settle_ms / 1000.0 if tree is not None else 0.0)

    @property
    def is_empty(self):
        return self.tree is None or self.tree.is_empty


class RenderSurface:
    """Mounted render targets by id, the stand-in for an offscreen document."""

    def __init__(self, clock=time.monotonic):
        self.clock = clock
        self._targets = {}

    def mount(self, target_id, tree):
        target = RenderTarget(target_id, tree, clock=self.clock)
        self._targets[target_id] = target
        return target

    def get(self, target_id):
        return self._targets.get(target_id)

    def unmount(self, target_id):
        self._targets.pop(target_id, None)

    def __contains__(self, target_id):
        return target_id in self._targets


def wait_for_target(surface, target_id, budget=WAIT_BUDGET, settle_delay=SETTLE_DELAY,
                    sleep=time.sleep):
    deadline = surface.clock() + budget
    while True:
        target = surface.get(target_id)
        now = surface.clock()
        if target is not None and not target.is_empty and now >= target.settled_at:
            break
        if now >= deadline:
            if target is None or target.is_empty:
                raise RenderTargetMissing(f"render target {target_id!r} is missing or empty")
            raise ExportFailure(f"render target {target_id!r} did not settle within {budget}s")
        sleep(POLL_INTERVAL)
    if settle_delay:
        sleep(settle_delay)
    return target


def page_offsets(image_height, page_height):
    """Vertical shift of the shared raster on each page, top edge down."""
    pages = max(1, math.ceil(round(image_height / page_height, 6)))
    return [-(i * page_height) for i in range(pages)]


def build_pdf(image, pagesize=A4):
    page_w, page_h = pagesize
    img_h = page_w * image.height / image.width
    reader = ImageReader(image)
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=pagesize)
    c.setTitle("Relatório de Performance da Frota")
    for i, offset in enumerate(page_offsets(img_h, page_h)):
        if i:
            c.showPage()
        c.setFillColor(colors.HexColor(BACKGROUND))
        c.rect(0, 0, page_w, page_h, stroke=0, fill=1)
        # offsets are top-down; reportlab places the image by its bottom edge
        c.drawImage(reader, 0, page_h - offset - img_h, width=page_w, height=img_h)
    c.showPage()
    c.save()
    return buf.getvalue()


def report_filename(base_name, today=None):
    return f"{base_name}_{(today or date.today()).isoformat()}.pdf"


def _write_atomic(path, data):
    tmp = path + ".part"
    try:
        with open(tmp, "wb") as fh:
            fh.write(data)
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.remove(tmp)


def generate_pdf(surface, target_id, base_name, out_dir, today=None,
                 budget=WAIT_BUDGET, settle_delay=SETTLE_DELAY, scale=RASTER_SCALE):
    target = wait_for_target(surface, target_id, budget=budget, settle_delay=settle_delay)
    try:
        image = rasterize(target.tree, width=PAGE_WIDTH_PX, scale=scale, background=BACKGROUND)
        data = build_pdf(image)
        os.makedirs(out_dir, exist_ok=True)
        path = os.path.join(out_dir, report_filename(base_name, today))
        _write_atomic(path, data)
    except FleetError:
        raise
    except Exception as e:
        log.exception("PDF export of %r failed", target_id)
        raise ExportFailure(str(e) or e.__class__.__name__) from e
    log.info("Exported report to %s", path)
    return path


class PdfExporter:
    """Runs one export at a time; a request made while busy is dropped."""

    def __init__(self, reports_dir=None, surface=None, budget=WAIT_BUDGET,
                 settle_delay=SETTLE_DELAY, scale=RASTER_SCALE):
        self.reports_dir = reports_dir or config.REPORTS_DIR
        self.surface = surface or RenderSurface()
        self.budget = budget
        self.settle_delay = settle_delay
        self.scale = scale
        self._lock = threading.Lock()

    @property
    def busy(self):
        return self._lock.locked()

    def export(self, truck_logs, expenses, base_name=config.REPORT_BASE_NAME, today=None):
        if not self._lock.acquire(blocking=False):
            log.warning("Export requested while another export is running; ignoring")
            return None
        try:
            try:
                tree = build_report(truck_logs, expenses, report_mode=True, issued=today)
            except Exception as e:
                log.exception("Building the report tree failed")
                raise ExportFailure(str(e) or e.__class__.__name__) from e
            self.surface.mount(TARGET_ID, tree)
            return generate_pdf(self.surface, TARGET_ID, base_name, self.reports_dir, today=today,
                                budget=self.budget, settle_delay=self.settle_delay, scale=self.scale)
        finally:
            self.surface.unmount(TARGET_ID)
            self._lock.release()
