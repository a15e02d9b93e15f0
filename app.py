from flask import Flask, jsonify, request
import sqlite3, os, uuid, logging
from datetime import datetime, timezone

from fleetlog import config
from fleetlog.errors import ValidationFailure
from fleetlog.records import KINDS, TRUCK, EXPENSE

APP_TITLE = "Gestão de Frotas — Record Store"

log = logging.getLogger(__name__)

app = Flask(__name__)
app.config["DATABASE"] = config.DB_PATH
app.config["CORS_ORIGIN"] = config.CORS_ORIGIN

def get_db():
    conn = sqlite3.connect(app.config["DATABASE"])
    conn.row_factory = sqlite3.Row
    return conn

def _columns_sql(kind):
    cols = ",\n        ".join(
        f"{f.column} {'REAL' if f.type is float else 'TEXT'} NOT NULL" for f in kind.fields)
    return f"""CREATE TABLE IF NOT EXISTS {kind.table}(
        id TEXT PRIMARY KEY,
        {cols},
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );"""

def init_db():
    conn = get_db()
    cur = conn.cursor()
    for kind in (TRUCK, EXPENSE):
        cur.execute(_columns_sql(kind))
    conn.commit()
    conn.close()

def now_iso():
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")

def row_to_record(kind, row):
    rec = {"id": row["id"]}
    for f in kind.fields:
        rec[f.name] = row[f.column]
    rec["createdAt"] = row["created_at"]
    rec["updatedAt"] = row["updated_at"]
    return rec

def fetch_one(conn, kind, id):
    cur = conn.execute(f"SELECT * FROM {kind.table} WHERE id=?", (id,))
    return cur.fetchone()

def error(message, status):
    return jsonify({"error": message}), status

@app.after_request
def add_cors_headers(resp):
    origin = app.config.get("CORS_ORIGIN")
    if origin:
        resp.headers["Access-Control-Allow-Origin"] = origin
        resp.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
        resp.headers["Access-Control-Allow-Headers"] = "Content-Type"
    return resp

@app.errorhandler(404)
def not_found(e):
    return error("Not found", 404)

@app.errorhandler(405)
def method_not_allowed(e):
    return error("Method not allowed", 405)

@app.errorhandler(500)
def server_error(e):
    log.error("Unhandled error: %s", getattr(e, "original_exception", e))
    return error("Internal server error", 500)

@app.route('/health')
@app.route('/api/health')
def health():
    return jsonify({"status": "OK"}), 200

def list_records(kind):
    conn = get_db()
    cur = conn.execute(f"SELECT * FROM {kind.table} ORDER BY created_at DESC, rowid DESC")
    rows = cur.fetchall()
    conn.close()
    return jsonify([row_to_record(kind, r) for r in rows])

def create_record(kind):
    try:
        data = kind.validate(request.get_json(silent=True))
    except ValidationFailure as e:
        log.warning("Rejected %s create: %s", kind.name, e)
        return error(str(e), 400)
    id = uuid.uuid4().hex
    stamp = now_iso()
    cols = [f.column for f in kind.fields]
    conn = get_db()
    try:
        conn.execute(
            f"INSERT INTO {kind.table}(id,{','.join(cols)},created_at,updated_at) "
            f"VALUES(?,{','.join('?' * len(cols))},?,?)",
            (id, *[data[f.name] for f in kind.fields], stamp, stamp))
        conn.commit()
        row = fetch_one(conn, kind, id)
    except sqlite3.IntegrityError as e:
        log.error("Failed to create %s: %s", kind.name, e)
        return error(str(e), 400)
    finally:
        conn.close()
    return jsonify(row_to_record(kind, row)), 201

def update_record(kind, id):
    try:
        data = kind.validate(request.get_json(silent=True), partial=True)
    except ValidationFailure as e:
        log.warning("Rejected %s update %s: %s", kind.name, id, e)
        return error(str(e), 400)
    conn = get_db()
    try:
        if fetch_one(conn, kind, id) is None:
            return error(f"{kind.label} not found", 404)
        if data:
            sets = [f"{f.column}=?" for f in kind.fields if f.name in data]
            params = [data[f.name] for f in kind.fields if f.name in data]
            conn.execute(f"UPDATE {kind.table} SET {', '.join(sets)}, updated_at=? WHERE id=?",
                         (*params, now_iso(), id))
            conn.commit()
        row = fetch_one(conn, kind, id)
    finally:
        conn.close()
    return jsonify(row_to_record(kind, row)), 200

def delete_record(kind, id):
    conn = get_db()
    cur = conn.execute(f"DELETE FROM {kind.table} WHERE id=?", (id,))
    deleted = cur.rowcount
    conn.commit(); conn.close()
    if deleted == 0:
        return error(f"{kind.label} not found", 404)
    return "", 204

def _register(kind):
    base = "/api" + kind.route
    app.add_url_rule(base, f"list_{kind.table}", lambda: list_records(kind), methods=["GET"])
    app.add_url_rule(base, f"create_{kind.table}", lambda: create_record(kind), methods=["POST"])
    app.add_url_rule(base + "/<id>", f"update_{kind.table}",
                     lambda id: update_record(kind, id), methods=["PUT"])
    app.add_url_rule(base + "/<id>", f"delete_{kind.table}",
                     lambda id: delete_record(kind, id), methods=["DELETE"])

for _kind in KINDS.values():
    _register(_kind)

if __name__=="__main__":
    logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    init_db()
    log.info("Serving %s from %s", APP_TITLE, app.config["DATABASE"])
    app.run(host="0.0.0.0", port=int(os.getenv("PORT","5000")), debug=False)
else:
    init_db()
