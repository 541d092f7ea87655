import asyncio
import uuid

import streamlit as st
import streamlit_shadcn_ui as ui

from form_collector import config
from form_collector.controller import FormController
from form_collector.form_state import ProfileImage
from form_collector.logger import write_event
from form_collector.storage import FileStore
from form_collector.viewer import copy_record, decode_data_url, table_rows

_MODE = "streamlit"

st.set_page_config(page_title="Custom Form", layout="wide")

st.title("Custom Form")
st.caption("Entries are validated on submit and kept in local storage on this machine.")

# Session state: one controller per browser session, nonce clears widgets
if "controller" not in st.session_state:
    st.session_state["controller"] = FormController(FileStore(config.LOCAL_STORAGE_DIR))
if "session_id" not in st.session_state:
    st.session_state["session_id"] = uuid.uuid4().hex
if "form_nonce" not in st.session_state:
    st.session_state["form_nonce"] = 0


def _controller() -> FormController:
    return st.session_state["controller"]


def _key(name: str) -> str:
    return f"form_{name}_{st.session_state['form_nonce']}"


def _rerun():
    rerun_fn = getattr(st, "rerun", getattr(st, "experimental_rerun", None))
    if rerun_fn is not None:
        rerun_fn()


def _clear_widgets():
    st.session_state["form_nonce"] += 1


def _on_field_change(field: str):
    _controller().change(field, st.session_state.get(_key(field)))


def _on_hobby_change(hobby: str):
    _controller().toggle_hobby(hobby, bool(st.session_state.get(_key(f"hobby_{hobby}"))))


def _on_agree_change():
    _controller().set_agree(bool(st.session_state.get(_key("agree"))))


def _on_profile_change():
    uploaded = st.session_state.get(_key("profile"))
    profile = None
    if uploaded is not None:
        profile = ProfileImage.from_bytes(uploaded.getvalue(), uploaded.name, uploaded.type)
        write_event(st.session_state["session_id"], "profile_selected", mode=_MODE, filename=uploaded.name)
    _controller().select_file(profile)


def _show_error(field: str):
    message = _controller().errors.get(field)
    if message is not None:
        st.markdown(f":red[{message}]")


controller = _controller()
session_id = st.session_state["session_id"]

left_col, right_col = st.columns(2, gap="large")
with left_col:
    st.text_input("Name", key=_key("name"), placeholder="Your full name", on_change=_on_field_change, args=("name",))
    _show_error("name")
with right_col:
    st.text_input("Email", key=_key("email"), placeholder="you@example.com", on_change=_on_field_change, args=("email",))
    _show_error("email")

age_col, gender_col = st.columns([1, 2], gap="large")
with age_col:
    st.text_input("Age", key=_key("age"), placeholder="e.g. 23", on_change=_on_field_change, args=("age",))
    _show_error("age")
with gender_col:
    st.radio(
        "Gender",
        options=config.GENDER_OPTIONS,
        index=None,
        format_func=str.capitalize,
        horizontal=True,
        key=_key("gender"),
        on_change=_on_field_change,
        args=("gender",),
    )
    _show_error("gender")

st.text_area("Bio", key=_key("bio"), placeholder="Short bio...", height=90, on_change=_on_field_change, args=("bio",))

st.write("Hobbies")
hobby_cols = st.columns(len(config.HOBBY_OPTIONS))
for hobby, col in zip(config.HOBBY_OPTIONS, hobby_cols):
    with col:
        st.checkbox(hobby.capitalize(), key=_key(f"hobby_{hobby}"), on_change=_on_hobby_change, args=(hobby,))

upload_col, preview_col = st.columns([2, 1], gap="large")
with upload_col:
    st.file_uploader(
        "Profile Image (optional)",
        type=config.IMAGE_EXTENSIONS,
        key=_key("profile"),
        on_change=_on_profile_change,
    )
with preview_col:
    handle = controller.preview.current
    preview_profile = controller.preview.registry.resolve(handle.token) if handle is not None else None
    if preview_profile is not None:
        st.image(preview_profile.read(), caption="preview", width=80)
    else:
        st.caption(config.PREVIEW_PLACEHOLDER)

st.checkbox("I agree to the terms", key=_key("agree"), on_change=_on_agree_change)
_show_error("agree")

submit_col, reset_col, _ = st.columns([1, 1, 6])
with submit_col:
    if st.button("Submit", type="primary", use_container_width=True):
        record = asyncio.run(controller.submit())
        if record is None:
            write_event(session_id, "validation_failed", mode=_MODE, fields=sorted(controller.errors))
        else:
            write_event(
                session_id,
                "submit",
                mode=_MODE,
                timestamp=record.timestamp,
                has_profile=record.profile_url is not None,
                total=len(controller.submissions),
            )
            _clear_widgets()
        _rerun()
with reset_col:
    if ui.button(text="Reset", key="btn_reset", variant="outline"):
        controller.reset()
        write_event(session_id, "reset", mode=_MODE)
        _clear_widgets()
        _rerun()

st.divider()

st.header("Saved Submissions")
records = controller.submissions
if not records:
    st.write("No submissions yet.")
else:
    widths = [2, 3, 1, 1, 2, 1, 2, 2]
    header_cols = st.columns(widths)
    for col, label in zip(header_cols, config.TABLE_COLUMNS):
        col.markdown(f"**{label}**")
    for record, row in zip(records, table_rows(records)):
        cols = st.columns(widths)
        cols[0].write(row["name"])
        cols[1].write(row["email"])
        cols[2].write(row["age"])
        cols[3].write(row["gender"])
        cols[4].write(row["hobbies"])
        image_bytes = decode_data_url(row["profile"])
        if image_bytes:
            cols[5].image(image_bytes, width=48)
        else:
            cols[5].write(config.MISSING_PROFILE)
        cols[6].caption(row["when"])
        with cols[7]:
            with st.popover("Copy"):
                copy_record(record, lambda text: st.code(text, language="json"))
            if st.button("Delete", key=f"delete_{row['timestamp']}"):
                if controller.delete(row["timestamp"]):
                    write_event(session_id, "delete", mode=_MODE, timestamp=row["timestamp"], total=len(controller.submissions))
                _rerun()
