from __future__ import annotations
from typing import Optional
import streamlit as st
from cap_dashboard.client import QueryClient
from cap_dashboard.config import MEBIBYTE, Settings
from cap_dashboard.exceptions import AuthenticationError, CapTableError, ValidationError
from cap_dashboard.notices import Notice
from cap_dashboard.pitch_deck import DeckUpload, upload_and_analyze, validate_pitch_deck
from cap_dashboard.session import AuthSession
from views.common import show_notices


def render(client: QueryClient, settings: Settings, session: Optional[AuthSession]):
    st.title("📑 Pitch Deck Analysis")
    max_mb = settings.MAX_UPLOAD_BYTES // MEBIBYTE
    st.markdown(f"Upload your pitch deck. PDF format only (Max {max_mb}MB).")

    if session is None:
        st.warning("Please log in to upload and analyze pitch decks.")

    uploaded = st.file_uploader("Pitch deck", type=["pdf"], key="pitch_deck_file")
    upload: Optional[DeckUpload] = None
    if uploaded is not None:
        try:
            validate_pitch_deck(uploaded.name, uploaded.type or "", uploaded.size, settings.MAX_UPLOAD_BYTES)
        except ValidationError as e:
            show_notices([Notice.from_error(e)])
        else:
            upload = DeckUpload.from_uploaded_file(uploaded)
            st.write(f"**{upload.name}** · {upload.size_label}")

    if st.button("⬆️ Upload & Analyze", type="primary", disabled=upload is None):
        with st.spinner("Uploading and analyzing …"):
            try:
                result = upload_and_analyze(client, session, upload, settings)
            except (ValidationError, AuthenticationError) as e:
                show_notices([Notice.from_error(e)])
            except CapTableError as e:
                show_notices([Notice.from_error(e, title="Upload failed")])
            else:
                st.session_state.last_analysis_id = result.analysis_id
                show_notices([
                    Notice("success", "Upload successful", "Your pitch deck has been uploaded successfully."),
                    Notice("success", "Analysis complete", "Your pitch deck has been analyzed successfully."),
                ])

    last = st.session_state.get("last_analysis_id")
    if last:
        st.info(f"Latest analysis: `/pitch-deck-analysis/{last}`")
