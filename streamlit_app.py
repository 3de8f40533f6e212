"""
Streamlit UI for the cleanview dashboard client.
Provides tabs for Upload, Clean (preview + save) and Train.
"""

import streamlit as st
import pandas as pd
import plotly.express as px
import asyncio
import tempfile
from pathlib import Path
import logging

from cleanview.api_client import BackendClient
from cleanview.config import ClientConfig
from cleanview.errors import CleanviewError
from cleanview.identity import FileIdentityProvider
from cleanview.operation_engine import IMPUTATION_METHODS, OperationType
from cleanview.session import CleaningSession, TrainingSession
from cleanview.training import ALGORITHM_OPTIONS, TrainingRequest, build_hyperparameters, known_algorithms

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Page configuration
st.set_page_config(
    page_title="cleanview",
    page_icon="🧹",
    layout="wide",
    initial_sidebar_state="expanded"
)


def get_sessions():
    """Create the per-browser sessions once."""
    if 'cleaning' not in st.session_state:
        config = ClientConfig.from_env()
        client = BackendClient(config, FileIdentityProvider(config.identity_path))
        st.session_state.cleaning = CleaningSession(client)
        st.session_state.training = TrainingSession(client)
        asyncio.run(st.session_state.cleaning.refresh_datasets())
    return st.session_state.cleaning, st.session_state.training


def show_notifications(session):
    for notification in session.notifications:
        if notification.is_error:
            st.error(f"**{notification.title}** {notification.description}")
        else:
            st.success(f"**{notification.title}** {notification.description}")
    session.notifications.clear()


def main():
    """Main Streamlit application."""
    st.title("🧹 cleanview")
    cleaning, training = get_sessions()

    with st.sidebar:
        st.header("⚙️ Configuration")
        st.text_input("Backend URL", value=cleaning.client.config.api_url, disabled=True)
        st.caption(f"User id: {cleaning.client.user_id}")
        if st.button("Check backend"):
            try:
                st.json(asyncio.run(cleaning.client.check_health()))
            except CleanviewError as e:
                logger.warning(f"Health check failed: {e}")
                st.error(f"Backend unavailable: {e}")

    tab1, tab2, tab3 = st.tabs(["📁 Upload", "🧹 Clean", "🎯 Train"])

    with tab1:
        upload_tab(cleaning)

    with tab2:
        clean_tab(cleaning)

    with tab3:
        train_tab(training)


def upload_tab(session: CleaningSession):
    """Upload tab: send a CSV/Excel file and list uploaded datasets."""
    st.header("📁 Upload Dataset")

    uploaded_file = st.file_uploader("Choose a CSV or Excel file", type=['csv', 'xls', 'xlsx'])
    if uploaded_file is not None and st.button("Upload", disabled=session.busy['uploading']):
        with tempfile.TemporaryDirectory(prefix='cleanview_upload_') as temp_dir:
            path = Path(temp_dir) / uploaded_file.name
            path.write_bytes(uploaded_file.getvalue())
            with st.spinner("Uploading..."):
                asyncio.run(session.upload(path, uploaded_file.type or None))

    show_notifications(session)

    if session.datasets:
        st.dataframe(pd.DataFrame([vars(d) for d in session.datasets]), use_container_width=True)
    else:
        st.info("No datasets yet")


def clean_tab(session: CleaningSession):
    """Clean tab: analysis, local preview of operations, save/reset."""
    st.header("🧹 Clean Data")

    if not session.datasets:
        st.info("Upload a file first")
        return

    names = {d.id: f"{d.name} ({d.num_rows} rows)" for d in session.datasets}
    ids = list(names)
    index = ids.index(session.selected_dataset_id) if session.selected_dataset_id in ids else 0
    selected = st.selectbox("Dataset", ids, index=index, format_func=names.get)
    if selected != session.selected_dataset_id:
        with st.spinner("Analyzing..."):
            asyncio.run(session.select_dataset(selected))

    preview = session.preview
    if preview is None:
        show_notifications(session)
        return

    stats = session.stats
    col1, col2, col3 = st.columns(3)
    col1.metric("Records", stats.total_records)
    col2.metric("Nulls", stats.total_nulls)
    col3.metric("Quality", f"{stats.quality_percent}%")

    st.subheader("Operations")
    col1, col2, col3, col4 = st.columns(4)
    if col1.button("Replace NULL with N/A"):
        session.apply(OperationType.REPLACE_NULLS)
    method = col2.selectbox("Imputation", IMPUTATION_METHODS)
    if col2.button("Impute"):
        session.apply(OperationType.IMPUTE, {'method': method})
    if col3.button("Normalize"):
        session.apply(OperationType.NORMALIZE)
    if col4.button("Encode categoricals"):
        session.apply(OperationType.ENCODE)

    if session.pending_operations:
        st.warning("Pending operations: " + ", ".join(op.label for op in session.pending_operations))
        save_col, reset_col = st.columns(2)
        if save_col.button("💾 Save", disabled=session.busy['saving']):
            with st.spinner("Saving..."):
                asyncio.run(session.save())
        if reset_col.button("↩️ Reset"):
            session.reset()

    show_notifications(session)

    preview = session.preview
    page = st.number_input("Page", min_value=1, max_value=session.page_count(), value=session.current_page)
    session.set_page(int(page))
    st.dataframe(preview.to_frame(tuple(session.current_rows())), use_container_width=True)

    columns = pd.DataFrame(
        [{'column': name, **info.to_dict()} for name, info in preview.columns_info.items()]
    )
    if not columns.empty:
        fig = px.bar(columns, x='column', y='null_percentage', color='is_numeric', title="Null percentage by column")
        st.plotly_chart(fig, use_container_width=True)


def train_tab(session: TrainingSession):
    """Train tab: pick a cleaned dataset, configure and train a model."""
    st.header("🎯 Train Model")

    if st.button("Load cleaned datasets") or not session.cleaned_datasets:
        asyncio.run(session.refresh_cleaned_datasets())
        asyncio.run(session.refresh_models())

    if not session.cleaned_datasets:
        show_notifications(session)
        st.info("No cleaned datasets yet")
        return

    names = {d.id: d.name for d in session.cleaned_datasets}
    ids = list(names)
    index = ids.index(session.selected_dataset_id) if session.selected_dataset_id in ids else 0
    selected = st.selectbox("Cleaned dataset", ids, index=index, format_func=names.get)
    if selected != session.selected_dataset_id:
        asyncio.run(session.select_dataset(selected))

    with st.form("train_form"):
        name = st.text_input("Model name")
        labels = {key: f"{group}: {label}" for group, options in ALGORITHM_OPTIONS.items() for key, label in options.items()}
        algorithm = st.selectbox("Algorithm", known_algorithms(), format_func=labels.get)
        target = st.selectbox("Target variable", session.columns)
        features = st.multiselect("Features", [c for c in session.columns if c != target])
        epochs = st.number_input("Epochs", min_value=1, value=100)
        batch_size = st.number_input("Batch size", min_value=1, value=32)
        learning_rate = st.number_input("Learning rate", min_value=0.0, value=0.001, format="%f")
        test_size = st.slider("Test split", min_value=0.1, max_value=0.5, value=0.2)
        submitted = st.form_submit_button("Train", disabled=session.busy['training'])

    if submitted:
        request = TrainingRequest(
            dataset_id=selected,
            name=name,
            algorithm=algorithm,
            target_variable=target or "",
            features=features,
            hyperparameters=build_hyperparameters(algorithm, int(epochs), int(batch_size), float(learning_rate)),
            test_size=float(test_size),
        )
        with st.spinner("Training..."):
            asyncio.run(session.train(request))

    show_notifications(session)

    if session.models:
        st.subheader("Trained models")
        st.dataframe(pd.DataFrame([vars(m) for m in session.models]), use_container_width=True)


if __name__ == "__main__":
    main()
