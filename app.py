"""
Chartboard: Main Streamlit Application
Upload a delimited-text dataset (or pick a bundled sample) and explore it
through any mix of 23 chart types plus metric cards.

Hot-reload: drop updated CSVs into the  data/  folder and hit Ctrl+R;
samples are fingerprinted by mtime and reloaded automatically.
"""
import streamlit as st

from chartboard.chart_registry import (
    CHART_CONFIG, FIELD_LABELS, ChartError, chart_ids, chart_label, default_config,
)
from chartboard.data_layer import (
    DatasetError, get_data_fingerprint, get_samples_fingerprint,
    list_sample_datasets, load_sample, load_upload, summarize_columns,
)
from chartboard.logger import get_logger, setup_logging
from chartboard.settings import load_settings
from chartboard.visualizations import build_chart, metric_cards

settings = load_settings()
setup_logging(settings.log_level)
logger = get_logger("chartboard.app")

MAX_CARDS = 24
CARDS_PER_ROW = 4

# ── Page Config ───────────────────────────────────────────────────────────────
st.set_page_config(
    page_title="Chartboard",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ── Custom CSS ────────────────────────────────────────────────────────────────
st.markdown("""
<style>
  @import url('https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700&display=swap');
  html, body, [class*="css"] { font-family: 'Inter', sans-serif; }

  .stApp { background-color: #f0f4fb; color: #1a2744; }
  .main .block-container { padding: 1.5rem 2rem 3rem; }
  section[data-testid="stSidebar"] { background-color: #dde6f5; border-right: 1px solid #b8cceb; }

  .app-header {
    background: linear-gradient(135deg, #4299e1 0%, #2b6cb0 60%, #2c5282 100%);
    border-radius: 12px;
    padding: 1.4rem 2rem;
    margin-bottom: 1.5rem;
    border: 1px solid #2b6cb0;
  }
  .app-header h1 { margin: 0; font-size: 1.75rem; font-weight: 700; color: #ffffff; }
  .app-header p  { margin: 0.3rem 0 0; font-size: 0.9rem; color: #bee3f8; }

  div[data-testid="metric-container"] {
    background: #ffffff;
    border-radius: 10px;
    padding: 1rem 1.2rem;
    border: 1px solid #d1ddf0;
    border-left: 3px solid #4299e1;
  }
  div[data-testid="metric-container"] label { color: #64748b !important; font-size: 0.78rem; }

  details { background: #ffffff !important; border: 1px solid #d1ddf0 !important;
            border-radius: 8px !important; }
  summary { color: #1a2744 !important; font-weight: 600; }
</style>
""", unsafe_allow_html=True)


# ── Session State Init ────────────────────────────────────────────────────────

def _init_state():
    defaults = {
        "df": None,
        "data_fingerprint": "",
        "dataset_name": "",
        "selected_charts": [],
    }
    for k, v in defaults.items():
        if k not in st.session_state:
            st.session_state[k] = v


_init_state()


# ── Data Loading ──────────────────────────────────────────────────────────────

@st.cache_data(show_spinner="Parsing CSV…")
def _parse_upload(fingerprint: str, name: str, mime_type: str, _raw: bytes, max_rows: int):
    """Cache key is the content fingerprint; the raw bytes are not hashed again."""
    return load_upload(name, mime_type, _raw, max_rows=max_rows)


@st.cache_data(show_spinner="Loading sample dataset…")
def _load_sample(fingerprint: str, data_dir: str, name: str, max_rows: int):
    """Cache key includes the samples fingerprint, so it auto-invalidates on file changes."""
    return load_sample(data_dir, name, max_rows=max_rows)


def _set_dataset(df, fingerprint: str, name: str):
    """Install a new dataset and forget every chart selection made for the old one."""
    st.session_state.df = df
    st.session_state.data_fingerprint = fingerprint
    st.session_state.dataset_name = name
    st.session_state.selected_charts = []
    for key in [k for k in st.session_state if str(k).startswith("cfg:")]:
        del st.session_state[key]
    if df is not None:
        logger.info("Dataset %s loaded: %d rows x %d columns", name, len(df), len(df.columns))


# ── Sidebar: Dataset ──────────────────────────────────────────────────────────

with st.sidebar:
    st.markdown("### 📊 Chartboard")
    st.markdown("---")
    st.markdown("**Dataset**")
    upload = st.file_uploader("Upload a CSV file", type=["csv", "tsv", "txt"])
    samples = list_sample_datasets(settings.data_dir)
    sample = st.selectbox(
        "…or pick a sample",
        options=samples,
        index=None,
        placeholder="Choose a sample dataset",
        disabled=upload is not None or not samples,
    )

try:
    if upload is not None:
        _raw = upload.getvalue()
        _fp = get_data_fingerprint(_raw)
        if _fp != st.session_state.data_fingerprint:
            _set_dataset(
                _parse_upload(_fp, upload.name, upload.type, _raw, settings.max_rows),
                _fp, upload.name,
            )
    elif sample:
        _fp = f"{get_samples_fingerprint(settings.data_dir)}:{sample}"
        if _fp != st.session_state.data_fingerprint:
            _set_dataset(
                _load_sample(_fp, settings.data_dir, sample, settings.max_rows),
                _fp, sample,
            )
except DatasetError as exc:
    logger.warning("Dataset rejected: %s", exc)
    _set_dataset(None, "", "")
    st.error(str(exc))

df = st.session_state.df

# ── Sidebar: Charts ───────────────────────────────────────────────────────────

with st.sidebar:
    st.markdown("---")
    st.markdown("**Charts**")
    st.multiselect(
        "Visualizations",
        options=chart_ids(),
        format_func=chart_label,
        key="selected_charts",
        disabled=df is None,
        label_visibility="collapsed",
        placeholder="Pick one or more charts",
    )
    st.markdown("---")
    st.markdown(
        "<small style='color:#94a3b8'>💡 Drop CSVs into <code>data/</code> "
        "and refresh the page to add or update samples.</small>",
        unsafe_allow_html=True,
    )


# ── Main Layout ───────────────────────────────────────────────────────────────

st.markdown(f"""
<div class="app-header">
  <h1>📊 Chartboard</h1>
  <p>Delimited-text explorer · {len(chart_ids()) - 1} chart types · metric cards
     {"&nbsp;·&nbsp; <strong>" + st.session_state.dataset_name + "</strong>" if df is not None else ""}</p>
</div>
""", unsafe_allow_html=True)

if df is None:
    st.info("Upload a CSV file or pick a sample dataset in the sidebar to get started.")
    st.stop()

headers = [str(c) for c in df.columns]

# ── Dataset Summary Row ───────────────────────────────────────────────────────
summary = summarize_columns(df)
k1, k2, k3, k4 = st.columns(4)
with k1:
    st.metric("Rows", f"{summary['rows']:,}")
with k2:
    st.metric("Columns", f"{summary['columns']:,}")
with k3:
    st.metric("Numeric columns", len(summary["numeric_columns"]),
              ", ".join(summary["numeric_columns"])[:40] or None, delta_color="off")
with k4:
    st.metric("Text columns", len(summary["categorical_columns"]),
              ", ".join(summary["categorical_columns"])[:40] or None, delta_color="off")

with st.expander("Preview data", expanded=False):
    st.dataframe(df.head(50), use_container_width=True)

st.markdown("---")


# ── Chart Panels ──────────────────────────────────────────────────────────────

def _field_selectors(chart_id: str) -> dict:
    """One selector per field role, prefilled with the positional defaults."""
    meta = CHART_CONFIG[chart_id]
    defaults = default_config(chart_id, headers)
    optional = meta.get("optional", ())
    config = {}

    for col, role in zip(st.columns(len(meta["fields"])), meta["fields"]):
        key = f"cfg:{chart_id}:{role}"
        with col:
            if role == "series":
                config[role] = st.multiselect(
                    FIELD_LABELS[role], headers, default=defaults.get(role, []), key=key,
                )
                continue
            options = ([""] if role in optional else []) + headers
            default = defaults.get(role, "")
            config[role] = st.selectbox(
                FIELD_LABELS[role], options,
                index=options.index(default) if default in options else 0,
                format_func=lambda c: c or "(none)",
                key=key,
            ) or None
    return config


def _render_cards(cards: list[dict]):
    for start in range(0, min(len(cards), MAX_CARDS), CARDS_PER_ROW):
        row = cards[start:start + CARDS_PER_ROW]
        for col, card in zip(st.columns(CARDS_PER_ROW), row):
            with col:
                st.metric(card["title"] or "—", card["value"], card["caption"], delta_color="off")
    if len(cards) > MAX_CARDS:
        st.caption(f"Showing the first {MAX_CARDS} of {len(cards)} rows.")


@st.fragment
def _chart_panel(chart_id: str):
    """Selectors and figure for one chart; reruns on its own when a selector changes."""
    st.caption(CHART_CONFIG[chart_id]["description"])
    config = _field_selectors(chart_id)
    try:
        if chart_id == "cards":
            _render_cards(metric_cards(df, config))
            return
        fig = build_chart(chart_id, df, config,
                          height=settings.chart_height, seed=settings.force_seed)
    except ChartError as exc:
        logger.warning("%s not drawn: %s", chart_id, exc)
        st.warning(str(exc))
        return
    st.plotly_chart(fig, use_container_width=True, key=f"fig:{chart_id}")


if not st.session_state.selected_charts:
    st.info("Pick one or more charts in the sidebar.")

for _chart_id in st.session_state.selected_charts:
    with st.expander(chart_label(_chart_id), expanded=True):
        _chart_panel(_chart_id)

# ── Footer ────────────────────────────────────────────────────────────────────
st.markdown("""
<div style='text-align:center;padding:2rem 0 0.5rem;color:#94a3b8;font-size:0.75rem'>
  Chartboard &nbsp;·&nbsp; Plotly &amp; Streamlit
</div>
""", unsafe_allow_html=True)
