from pathlib import Path

from flask import abort, current_app, render_template, send_from_directory
from werkzeug.security import safe_join

from linkgroups.web import web_bp


@web_bp.route("/access-denied")
def access_denied():
    return render_template("access_denied.html")


@web_bp.route("/", defaults={"path": ""})
@web_bp.route("/<path:path>")
def client_shell(path: str):
    if path == "api" or path.startswith("api/"):
        abort(404)

    static_folder = current_app.static_folder
    candidate = safe_join(static_folder, path) if path and static_folder else None
    if candidate and Path(candidate).is_file():
        return send_from_directory(static_folder, path)
    return render_template("index.html")
