import logging
from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor

from fleetlog import config, filters
from fleetlog.aggregation import summarize
from fleetlog.errors import FleetError, describe
from fleetlog.filters import FilterSpec
from fleetlog.records import get_kind

log = logging.getLogger(__name__)

Alert = namedtuple("Alert", "message type")


class FleetData:
    """Owner of the loaded records and of the one filter/search state every view reads.

    Collections are exposed as tuples. Mutations go to the record store first
    and are followed by a full reload, so local state never runs ahead of the
    store; a failed call leaves it exactly as it was.
    """

    def __init__(self, client, dashboard_uses_filters=None):
        self.client = client
        self.dashboard_uses_filters = (config.dashboard_uses_filters()
                                       if dashboard_uses_filters is None else dashboard_uses_filters)
        self.truck_logs = ()
        self.expenses = ()
        self.is_loading = False
        self.loaded = False
        self.error = None
        self.alert = None
        self.filters = FilterSpec()
        self.search_term = None

    def _records(self, kind):
        return self.truck_logs if get_kind(kind).name == "truck" else self.expenses

    def _store(self, kind, records):
        if get_kind(kind).name == "truck":
            self.truck_logs = tuple(records)
        else:
            self.expenses = tuple(records)

    def load(self):
        self.is_loading = True
        self.error = None
        with ThreadPoolExecutor(max_workers=2) as pool:
            pending = [pool.submit(self.client.list, kind) for kind in ("truck", "expense")]
        try:
            logs, expenses = [f.result() for f in pending]
        except FleetError as e:
            log.error("Loading records failed: %s", e)
            self.error = describe(e)
            return False
        finally:
            self.is_loading = False
        self.truck_logs, self.expenses = tuple(logs or ()), tuple(expenses or ())
        self.loaded = True
        return True

    def retry(self):
        return self.load()

    @property
    def view_state(self):
        if self.is_loading or (not self.loaded and self.error is None):
            return "loading"
        if self.error:
            return "error"
        if not self.truck_logs and not self.expenses:
            return "empty"
        return "ready"

    def dismiss_alert(self):
        self.alert = None

    def _fail(self, action, kind, e):
        log.warning("%s %s failed: %s", action, get_kind(kind).name, e)
        self.alert = Alert(describe(e), "error")

    def add(self, kind, payload):
        try:
            created = self.client.create(kind, payload)
        except FleetError as e:
            self._fail("Create", kind, e)
            return None
        self.alert = Alert("Registro adicionado.", "success")
        self.load()
        return created

    def update(self, kind, record_id, changes):
        if not changes:
            return None
        try:
            updated = self.client.update(kind, record_id, changes)
        except FleetError as e:
            self._fail("Update", kind, e)
            return None
        self.alert = Alert("Registro atualizado.", "success")
        self.load()
        return updated

    def delete(self, kind, record_id):
        try:
            self.client.delete(kind, record_id)
        except FleetError as e:
            self._fail("Delete", kind, e)
            return False
        self._store(kind, [r for r in self._records(kind) if r.get("id") != record_id])
        self.alert = Alert("Registro excluído.", "success")
        return True

    def submit_form(self, kind, form, editing=None):
        kind = get_kind(kind)
        payload = kind.parse_form(form)
        if editing is None:
            return self.add(kind, payload)
        return self.update(kind, editing["id"], kind.diff(editing, payload))

    def set_filter(self, **fields):
        self.filters = self.filters.update(**fields)

    def clear_filters(self):
        self.filters = FilterSpec()
        self.search_term = None

    def set_search(self, term):
        self.search_term = term or None

    @property
    def filtered(self):
        return filters.apply(self.truck_logs, self.expenses, self.filters, self.search_term)

    @property
    def filtered_truck_logs(self):
        return self.filtered[0]

    @property
    def filtered_expenses(self):
        return self.filtered[1]

    def filter_options(self):
        return filters.options(self.truck_logs, self.expenses)

    def dashboard(self):
        if self.dashboard_uses_filters:
            return summarize(*self.filtered)
        return summarize(self.truck_logs, self.expenses)

    def export_report(self, exporter, base_name=config.REPORT_BASE_NAME, today=None):
        logs, expenses = self.filtered
        try:
            path = exporter.export(logs, expenses, base_name=base_name, today=today)
        except FleetError as e:
            log.error("Report export failed: %s", e)
            self.alert = Alert(describe(e), "error")
            return None
        if path is None:
            return None
        self.alert = Alert("Relatório PDF gerado com sucesso!", "success")
        return path
