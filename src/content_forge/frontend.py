import os

import streamlit as st

from content_forge.client import ProxyClient, poll_until_done, submit_document
from content_forge.config import Settings
from content_forge.session import Status, UploadSession

# CONSTANTS
PROXY_URL = os.environ.get("CONTENT_FORGE_URL", "http://127.0.0.1:8000")
SETTINGS = Settings.from_env()

st.set_page_config(page_title="ContentForgeAI", page_icon="⚡")

st.title("⚡ ContentForgeAI")
st.write("Transform your content briefs into SEO-optimized, publication-ready articles.")

if "session" not in st.session_state:
    st.session_state.session = UploadSession(max_attempts=SETTINGS.poll_max_attempts)
session: UploadSession = st.session_state.session

if session.status is Status.COMPLETED:
    st.success("Content Generated Successfully!")
    st.write(f"📄 {session.file_name}")
    st.link_button("View in Google Drive", session.result_link)
    if st.button("Submit Another Brief"):
        session.reset()
        st.rerun()
    st.stop()

if session.status is Status.SUBMITTING:
    # The gateway gave up but the webhook is still writing the article.
    st.info(session.stage)
    st.warning(session.error)
    if st.button("Start over"):
        session.reset()
        st.rerun()
    st.stop()

# 1. File Uploader Widget
uploaded_file = st.file_uploader("Drop your PDF here or click to browse", type="pdf")

if uploaded_file is not None:
    if uploaded_file.name != session.file_name:
        session.select_file(uploaded_file.name, uploaded_file.size, uploaded_file.type)
    if session.file_name == uploaded_file.name:
        st.caption(f"✓ Ready to submit ({uploaded_file.size / 1024:.2f} KB)")

if session.error:
    st.error(session.error)

# 2. Button to trigger the upload
if st.button("Generate SEO Content", disabled=uploaded_file is None):
    client = ProxyClient(PROXY_URL, timeout=SETTINGS.timeout_seconds)
    with st.spinner("Uploading your content brief..."):
        submit_document(session, client, uploaded_file.name, uploaded_file)

    if session.status is Status.POLLING:
        progress = st.empty()
        progress.info(session.stage)
        poll_until_done(
            session,
            client,
            SETTINGS.poll_interval_seconds,
            on_tick=lambda s: progress.info(f"{s.stage or s.status.value} (check {s.polling_attempts})"),
        )

    st.rerun()
