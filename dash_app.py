"""Dash front end for the form collector."""

from __future__ import annotations

import asyncio
import threading
import uuid
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Tuple

import dash
from dash import ALL, MATCH, Input, Output, State, dcc, html
from flask import Response, abort

from form_collector import config
from form_collector.controller import FormController
from form_collector.form_state import ProfileImage
from form_collector.logger import build_csv_content, safe_session_id, write_event
from form_collector.preview import PreviewRegistry
from form_collector.storage import MemoryStore, SubmissionLog
from form_collector.viewer import copy_record, table_rows

_ERROR_FIELDS = ["name", "email", "age", "gender", "agree"]

_PREVIEW_REGISTRY = PreviewRegistry()
_PAGES: "OrderedDict[str, FormController]" = OrderedDict()
_PAGES_LOCK = threading.Lock()

_LABEL_STYLE: Dict[str, Any] = {"display": "block", "fontWeight": 600, "fontSize": "0.9rem"}
_INPUT_STYLE: Dict[str, Any] = {
    "display": "block",
    "width": "100%",
    "padding": "8px",
    "marginTop": "4px",
    "borderRadius": "6px",
    "border": "1px solid #cccccc",
    "boxSizing": "border-box",
}
_ERROR_STYLE: Dict[str, Any] = {"color": "#dc2626", "fontSize": "0.85rem", "marginTop": "4px"}
_THUMB_STYLE: Dict[str, Any] = {
    "height": "80px",
    "width": "80px",
    "objectFit": "cover",
    "borderRadius": "6px",
    "border": "1px solid #cccccc",
}
_PLACEHOLDER_STYLE: Dict[str, Any] = {
    **_THUMB_STYLE,
    "display": "flex",
    "alignItems": "center",
    "justifyContent": "center",
    "fontSize": "0.85rem",
    "color": "#6b7280",
}
_CELL_STYLE: Dict[str, Any] = {"padding": "8px", "textAlign": "left", "borderTop": "1px solid #e5e7eb"}


def _get_session_id(session_data: Optional[Dict[str, Any]]) -> str:
    if isinstance(session_data, dict):
        return safe_session_id(session_data.get("session_id"))
    return "unknown"


def _get_page_id(page_data: Optional[Dict[str, Any]]) -> str:
    if isinstance(page_data, dict) and page_data.get("page_id"):
        return str(page_data["page_id"])
    return "unknown"


def _get_controller(page_id: str, storage_data: Optional[Dict[str, str]]) -> Tuple[FormController, MemoryStore]:
    """Controller for one page load, with its log re-read from the browser store.

    A reload gets a new page id and so a fresh form. Only the most recent
    ``MAX_LIVE_PAGES`` loads keep a controller; older ones lose their preview.
    """
    store = MemoryStore.from_snapshot(storage_data, quota_bytes=config.LOCAL_STORAGE_QUOTA)
    evicted: List[FormController] = []
    with _PAGES_LOCK:
        controller = _PAGES.get(page_id)
        if controller is None:
            controller = FormController(store, registry=_PREVIEW_REGISTRY)
            _PAGES[page_id] = controller
            while len(_PAGES) > config.MAX_LIVE_PAGES:
                _, oldest = _PAGES.popitem(last=False)
                evicted.append(oldest)
        else:
            _PAGES.move_to_end(page_id)
            controller.load_log(store)
    for oldest in evicted:
        oldest.preview.release()
    return controller, store


def _preview_styles(url: Optional[str]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    if url:
        return dict(_THUMB_STYLE), {**_PLACEHOLDER_STYLE, "display": "none"}
    return {**_THUMB_STYLE, "display": "none"}, dict(_PLACEHOLDER_STYLE)


def _field_block(label: str, control: Any, error_id: Optional[str] = None) -> html.Div:
    children = [html.Label(label, style=_LABEL_STYLE), control]
    if error_id:
        children.append(html.P("", id=error_id, style=_ERROR_STYLE))
    return html.Div(children, style={"marginBottom": "16px"})


def _build_form() -> html.Div:
    gender_options = [{"label": g.capitalize(), "value": g} for g in config.GENDER_OPTIONS]
    hobby_options = [{"label": h.capitalize(), "value": h} for h in config.HOBBY_OPTIONS]
    return html.Div(
        [
            html.Div(
                [
                    _field_block(
                        "Name",
                        dcc.Input(id="input-name", type="text", value="", placeholder="Your full name", style=_INPUT_STYLE),
                        "error-name",
                    ),
                    _field_block(
                        "Email",
                        dcc.Input(id="input-email", type="text", value="", placeholder="you@example.com", style=_INPUT_STYLE),
                        "error-email",
                    ),
                ],
                style={"display": "grid", "gridTemplateColumns": "1fr 1fr", "gap": "16px"},
            ),
            html.Div(
                [
                    _field_block(
                        "Age",
                        dcc.Input(id="input-age", type="text", value="", placeholder="e.g. 23", style=_INPUT_STYLE),
                        "error-age",
                    ),
                    _field_block(
                        "Gender",
                        dcc.RadioItems(
                            id="radio-gender",
                            options=gender_options,
                            value=None,
                            inline=True,
                            inputStyle={"marginRight": "6px", "marginLeft": "12px"},
                        ),
                        "error-gender",
                    ),
                ],
                style={"display": "grid", "gridTemplateColumns": "1fr 2fr", "gap": "16px"},
            ),
            _field_block(
                "Bio",
                dcc.Textarea(id="input-bio", value="", placeholder="Short bio...", rows=3, style=_INPUT_STYLE),
            ),
            _field_block(
                "Hobbies",
                dcc.Checklist(
                    id="check-hobbies",
                    options=hobby_options,
                    value=[],
                    inline=True,
                    inputStyle={"marginRight": "6px", "marginLeft": "12px"},
                ),
            ),
            html.Div(
                [
                    _field_block(
                        "Profile Image (optional)",
                        dcc.Upload(
                            id="upload-profile",
                            accept=config.UPLOAD_ACCEPT,
                            multiple=False,
                            children=html.Div(["Drag and drop or ", html.A("select an image")]),
                            style={
                                "padding": "16px",
                                "border": "1px dashed #9ca3af",
                                "borderRadius": "6px",
                                "textAlign": "center",
                                "cursor": "pointer",
                            },
                        ),
                    ),
                    html.Div(
                        [
                            html.Img(id="preview-image", alt="preview", style={**_THUMB_STYLE, "display": "none"}),
                            html.Div(config.PREVIEW_PLACEHOLDER, id="preview-placeholder", style=_PLACEHOLDER_STYLE),
                        ]
                    ),
                ],
                style={"display": "grid", "gridTemplateColumns": "2fr 1fr", "gap": "16px", "alignItems": "center"},
            ),
            _field_block(
                "",
                dcc.Checklist(
                    id="check-agree",
                    options=[{"label": " I agree to the terms", "value": "agree"}],
                    value=[],
                ),
                "error-agree",
            ),
            html.Div(
                [
                    html.Button(
                        "Submit",
                        id="btn-submit",
                        n_clicks=0,
                        type="button",
                        style={
                            "padding": "8px 16px",
                            "backgroundColor": "#2563eb",
                            "color": "#ffffff",
                            "border": "none",
                            "borderRadius": "6px",
                            "marginRight": "8px",
                        },
                    ),
                    html.Button(
                        "Reset",
                        id="btn-reset",
                        n_clicks=0,
                        type="button",
                        style={"padding": "8px 16px", "borderRadius": "6px"},
                    ),
                ]
            ),
        ]
    )


def _render_table(records) -> Any:
    if not records:
        return html.P("No submissions yet.", style={"color": "#4b5563"})
    header = html.Thead(html.Tr([html.Th(col, style=_CELL_STYLE) for col in config.TABLE_COLUMNS]))
    body_rows = []
    for row in table_rows(records):
        ts = row["timestamp"]
        if row["profile"]:
            profile_cell = html.Img(src=row["profile"], alt="profile", style={**_THUMB_STYLE, "height": "48px", "width": "48px"})
        else:
            profile_cell = html.Span(config.MISSING_PROFILE, style={"color": "#6b7280"})
        body_rows.append(
            html.Tr(
                [
                    html.Td(row["name"], style=_CELL_STYLE),
                    html.Td(row["email"], style=_CELL_STYLE),
                    html.Td(row["age"], style=_CELL_STYLE),
                    html.Td(row["gender"], style=_CELL_STYLE),
                    html.Td(row["hobbies"], style=_CELL_STYLE),
                    html.Td(profile_cell, style=_CELL_STYLE),
                    html.Td(row["when"], style={**_CELL_STYLE, "fontSize": "0.85rem"}),
                    html.Td(
                        [
                            dcc.Clipboard(
                                id={"type": "btn-copy", "index": ts},
                                title="Copy",
                                style={"display": "inline-block", "marginRight": "8px", "cursor": "pointer"},
                            ),
                            html.Button(
                                "Delete",
                                id={"type": "btn-delete", "index": ts},
                                n_clicks=0,
                                style={
                                    "backgroundColor": "#dc2626",
                                    "color": "#ffffff",
                                    "border": "none",
                                    "borderRadius": "4px",
                                    "padding": "4px 8px",
                                },
                            ),
                        ],
                        style=_CELL_STYLE,
                    ),
                ]
            )
        )
    return html.Table([header, html.Tbody(body_rows)], style={"width": "100%", "borderCollapse": "collapse"})


def _records_from_storage(storage_data: Optional[Dict[str, str]]):
    return SubmissionLog(MemoryStore.from_snapshot(storage_data)).records


app = dash.Dash(__name__)
server = app.server


@server.route(f"{config.PREVIEW_ROUTE}/<token>")
def _serve_preview(token: str):
    profile = _PREVIEW_REGISTRY.resolve(token)
    if profile is None:
        abort(404)
    return Response(profile.read(), mimetype=profile.content_type)


def _serve_layout() -> html.Div:
    return html.Div(
        [
            dcc.Store(id="store-page", storage_type="memory", data={"page_id": uuid.uuid4().hex}),
            dcc.Store(
                id="store-session",
                storage_type="local",
                data={"session_id": uuid.uuid4().hex},
            ),
            dcc.Store(id="store-submissions", storage_type="local", data={}),
            dcc.Store(id="store-form-sync", data=None),
            dcc.Download(id="download-csv"),
            html.Div(
                [
                    html.H1("Custom Form", style={"fontSize": "1.5rem", "marginTop": "0"}),
                    _build_form(),
                    html.Div(
                        [
                            html.Div(
                                [
                                    html.H2("Saved Submissions", style={"fontSize": "1.25rem"}),
                                    html.Button("Download CSV", id="btn-download-csv", n_clicks=0, type="button"),
                                ],
                                style={"display": "flex", "justifyContent": "space-between", "alignItems": "center"},
                            ),
                            html.Div(id="submissions-table", style={"overflowX": "auto"}),
                        ],
                        style={"marginTop": "32px"},
                    ),
                ],
                style={
                    "maxWidth": "960px",
                    "margin": "24px auto",
                    "padding": "24px",
                    "backgroundColor": "#ffffff",
                    "borderRadius": "16px",
                    "boxShadow": "0 4px 12px rgba(0,0,0,0.08)",
                },
            ),
        ],
        style={"backgroundColor": "#f9fafb", "minHeight": "100vh", "padding": "8px"},
    )


app.layout = _serve_layout


@app.callback(
    Output("store-form-sync", "data"),
    [
        Input("input-name", "value"),
        Input("input-email", "value"),
        Input("input-age", "value"),
        Input("radio-gender", "value"),
        Input("input-bio", "value"),
        Input("check-hobbies", "value"),
        Input("check-agree", "value"),
    ],
    [
        State("store-page", "data"),
        State("store-session", "data"),
        State("store-submissions", "data"),
    ],
    prevent_initial_call=True,
)
def _sync_fields(name, email, age, gender, bio, hobbies, agree, page_data, session_data, storage_data):
    ctx = dash.callback_context
    if not ctx.triggered:
        return dash.no_update
    controller, _ = _get_controller(_get_page_id(page_data), storage_data)
    # The whole visible form is mirrored, not just the field that fired.
    for field, value in zip(config.SCALAR_FIELDS, (name, email, age, gender, bio)):
        controller.change(field, value)
    controller.set_hobbies(hobbies)
    controller.set_agree("agree" in (agree or []))
    return {"touched": [t["prop_id"] for t in ctx.triggered]}


@app.callback(
    [
        Output("preview-image", "src"),
        Output("preview-image", "style"),
        Output("preview-placeholder", "style"),
    ],
    Input("upload-profile", "contents"),
    [
        State("upload-profile", "filename"),
        State("store-page", "data"),
        State("store-session", "data"),
        State("store-submissions", "data"),
    ],
    prevent_initial_call=True,
)
def _handle_upload(contents, filename, page_data, session_data, storage_data):
    session_id = _get_session_id(session_data)
    controller, _ = _get_controller(_get_page_id(page_data), storage_data)
    profile = None
    if contents:
        try:
            profile = ProfileImage.from_data_url(contents, filename)
        except ValueError as exc:
            print("[form-upload]", exc)
            return dash.no_update, dash.no_update, dash.no_update
    controller.select_file(profile)
    if profile is not None:
        write_event(session_id, "profile_selected", filename=profile.filename, content_type=profile.content_type)
    url = controller.preview.url
    image_style, placeholder_style = _preview_styles(url)
    return url, image_style, placeholder_style


@app.callback(
    [
        *[Output(f"error-{field}", "children") for field in _ERROR_FIELDS],
        Output("store-submissions", "data"),
        Output("input-name", "value"),
        Output("input-email", "value"),
        Output("input-age", "value"),
        Output("radio-gender", "value"),
        Output("input-bio", "value"),
        Output("check-hobbies", "value"),
        Output("check-agree", "value"),
        Output("upload-profile", "contents"),
    ],
    [
        Input("btn-submit", "n_clicks"),
        Input("btn-reset", "n_clicks"),
    ],
    [
        State("store-page", "data"),
        State("store-session", "data"),
        State("store-submissions", "data"),
    ],
    prevent_initial_call=True,
)
def _handle_form_action(submit_clicks, reset_clicks, page_data, session_data, storage_data):
    no_change = [dash.no_update] * (len(_ERROR_FIELDS) + 9)
    ctx = dash.callback_context
    if not ctx.triggered:
        return no_change
    trigger_id = ctx.triggered[0]["prop_id"].split(".")[0]
    session_id = _get_session_id(session_data)
    controller, store = _get_controller(_get_page_id(page_data), storage_data)

    storage_update: Any = dash.no_update
    if trigger_id == "btn-submit":
        if not submit_clicks:
            return no_change
        record = asyncio.run(controller.submit())
        if record is None:
            write_event(session_id, "validation_failed", fields=sorted(controller.errors))
            errors = [controller.errors.get(field, "") for field in _ERROR_FIELDS]
            return [*errors, *([dash.no_update] * 9)]
        write_event(
            session_id,
            "submit",
            timestamp=record.timestamp,
            has_profile=record.profile_url is not None,
            total=len(controller.submissions),
        )
        storage_update = store.snapshot()
    elif trigger_id == "btn-reset":
        if not reset_clicks:
            return no_change
        controller.reset()
        write_event(session_id, "reset")
    else:
        return no_change

    state = controller.state
    cleared_errors = [""] * len(_ERROR_FIELDS)
    return [
        *cleared_errors,
        storage_update,
        state.name,
        state.email,
        state.age,
        state.gender or None,
        state.bio,
        list(state.hobbies),
        ["agree"] if state.agree else [],
        None,
    ]


@app.callback(
    Output("store-submissions", "data", allow_duplicate=True),
    Input({"type": "btn-delete", "index": ALL}, "n_clicks"),
    [
        State("store-page", "data"),
        State("store-session", "data"),
        State("store-submissions", "data"),
    ],
    prevent_initial_call=True,
)
def _handle_delete(delete_clicks, page_data, session_data, storage_data):
    ctx = dash.callback_context
    if not ctx.triggered or not ctx.triggered[0].get("value"):
        return dash.no_update
    triggered = ctx.triggered_id
    if not isinstance(triggered, dict):
        return dash.no_update
    timestamp = triggered.get("index")
    session_id = _get_session_id(session_data)
    controller, store = _get_controller(_get_page_id(page_data), storage_data)
    if not controller.delete(timestamp):
        return dash.no_update
    write_event(session_id, "delete", timestamp=timestamp, total=len(controller.submissions))
    return store.snapshot()


@app.callback(
    Output({"type": "btn-copy", "index": MATCH}, "content"),
    Input({"type": "btn-copy", "index": MATCH}, "n_clicks"),
    [
        State("store-page", "data"),
        State("store-session", "data"),
        State("store-submissions", "data"),
    ],
    prevent_initial_call=True,
)
def _handle_copy(n_clicks, page_data, session_data, storage_data):
    ctx = dash.callback_context
    triggered = ctx.triggered_id
    if not n_clicks or not isinstance(triggered, dict):
        return dash.no_update
    session_id = _get_session_id(session_data)
    controller, _ = _get_controller(_get_page_id(page_data), storage_data)
    record = controller.log.find(triggered.get("index"))
    if record is None:
        return dash.no_update
    copied: List[str] = []
    if not copy_record(record, copied.append):
        return dash.no_update
    write_event(session_id, "copy", timestamp=record.timestamp)
    return copied[0]


@app.callback(
    Output("download-csv", "data"),
    Input("btn-download-csv", "n_clicks"),
    State("store-session", "data"),
    State("store-submissions", "data"),
    prevent_initial_call=True,
)
def _handle_download_csv(n_clicks, session_data, storage_data):
    if not n_clicks:
        return dash.no_update
    csv_content = build_csv_content(_records_from_storage(storage_data))
    if not csv_content:
        return dash.no_update
    write_event(_get_session_id(session_data), "export", export_type="csv")
    return dcc.send_string(csv_content, filename="submissions.csv")


@app.callback(
    Output("submissions-table", "children"),
    Input("store-submissions", "data"),
)
def _render_submissions(storage_data):
    return _render_table(_records_from_storage(storage_data))


if __name__ == "__main__":
    app.run(debug=True)
