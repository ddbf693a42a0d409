"""
FootScan – foot length/width and shoe size from a photo with an A4 sheet
Streamlit Web App
"""

import io
import logging

import cv2
import pandas as pd
import streamlit as st
from PIL import Image

from foot_config import A4_LONG_MM, A4_SHORT_MM, CHART_MODES, DEFAULT_CONFIG, configure_logging
from foot_extract import bytes_to_bgr
from foot_sizing import converse_chart
from shoe_pipeline import ShoeSizePipeline

configure_logging(logging.INFO)

# ─────────────────────────────────────────────────────────────────────────────
# PAGE CONFIG
# ─────────────────────────────────────────────────────────────────────────────
st.set_page_config(
    page_title="FootScan",
    page_icon="👣",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
:root {
    --surface: #161a22;
    --border: #252c3a;
    --accent: #00e5a0;
    --accent2: #0099ff;
    --warn: #ff6b35;
    --muted: #64748b;
    --radius: 12px;
}
.card {
    background: var(--surface);
    border: 1px solid var(--border);
    border-radius: var(--radius);
    padding: 1.5rem;
    margin-bottom: 1rem;
}
.metrics-row { display: flex; gap: 1rem; flex-wrap: wrap; }
.metric-chip {
    flex: 1; min-width: 110px;
    background: var(--surface);
    border: 1px solid var(--border);
    border-radius: var(--radius);
    padding: 1rem; text-align: center;
}
.metric-chip .label { font-size: 0.7rem; color: var(--muted); text-transform: uppercase; }
.metric-chip .value { font-size: 2rem; font-weight: 800; color: var(--accent); }
.metric-chip .sub   { font-size: 0.75rem; color: var(--muted); }
.badge.err { color: var(--warn); border: 1px solid var(--warn); border-radius: 999px; padding: .25rem .75rem; }
</style>
""", unsafe_allow_html=True)


# ─────────────────────────────────────────────────────────────────────────────
# PIPELINE  (cached per threshold set)
# ─────────────────────────────────────────────────────────────────────────────
@st.cache_resource(show_spinner=False)
def load_pipeline(reference_length_mm, size_chart, chart_mode,
                  proximity_radius_px, reference_extent_min, subject_solidity_max):
    config = DEFAULT_CONFIG.replace(
        reference_length_mm  = reference_length_mm,
        size_chart           = size_chart,
        chart_mode           = chart_mode,
        proximity_radius_px  = proximity_radius_px,
        reference_extent_min = reference_extent_min,
        subject_solidity_max = subject_solidity_max,
    )
    return ShoeSizePipeline(config)


# ─────────────────────────────────────────────────────────────────────────────
# SIDEBAR — calibration & thresholds
# ─────────────────────────────────────────────────────────────────────────────
with st.sidebar:
    st.markdown("### ⚙️ Calibration")
    edge = st.radio("A4 edge used for scale", ["Long edge (297 mm)", "Short edge (210 mm)"])
    reference_length_mm = A4_LONG_MM if edge.startswith("Long") else A4_SHORT_MM

    size_chart = st.selectbox("Size chart", ["formula", "converse"])
    chart_mode = st.selectbox("Chart rounding", list(CHART_MODES),
                              disabled=size_chart != "converse")

    st.markdown("### 🎚️ Detection thresholds")
    proximity = st.slider("Foot ↔ A4 max distance (px)", 100, 1000,
                          int(DEFAULT_CONFIG.proximity_radius_px), step=25)
    ref_extent = st.slider("A4 min extent", 0.1, 0.95, DEFAULT_CONFIG.reference_extent_min, step=0.05)
    foot_solidity = st.slider("Foot max solidity", 0.5, 1.0, DEFAULT_CONFIG.subject_solidity_max, step=0.01)

    st.markdown("---")
    st.markdown("""
1. **Outlines** — bright-sheet threshold, edge detection as fallback
2. **A4** — rectangle with aspect closest to √2
3. **Foot** — largest shape next to the A4
4. **Scale** — A4 edge in pixels → mm
5. **Size** — UK / US / EU conversion
""")

pipeline = load_pipeline(reference_length_mm, size_chart, chart_mode,
                         float(proximity), float(ref_extent), float(foot_solidity))


# ─────────────────────────────────────────────────────────────────────────────
# INPUT — Upload or Camera
# ─────────────────────────────────────────────────────────────────────────────
st.title("👣 FootScan")
st.caption("Place your foot next to a flat A4 sheet and take a top-down photo.")

tab_upload, tab_camera = st.tabs(["📁 Upload Image", "📷 Take a Photo"])

image_bgr = None

with tab_upload:
    uploaded = st.file_uploader(
        "Drop your foot image here (JPG, PNG, JPEG)",
        type=["jpg", "jpeg", "png"],
        label_visibility="collapsed",
    )
    if uploaded:
        try:
            image_bgr = bytes_to_bgr(uploaded.read())
        except ValueError as e:
            st.error(f"Could not read \"{uploaded.name}\": {e}")

with tab_camera:
    camera_img = st.camera_input("Take a photo of your foot next to the A4 paper")
    if camera_img:
        try:
            image_bgr = bytes_to_bgr(camera_img.read())
        except ValueError as e:
            st.error(f"Could not read the camera photo: {e}")


# ─────────────────────────────────────────────────────────────────────────────
# ANALYSIS
# ─────────────────────────────────────────────────────────────────────────────
if image_bgr is None:
    st.info("Upload or capture a foot image to begin.")
    st.stop()

col_orig, col_run = st.columns([2, 1])
with col_orig:
    st.image(cv2.cvtColor(image_bgr, cv2.COLOR_BGR2RGB),
             caption="Input image", width='stretch')
with col_run:
    run_btn = st.button("🔍 Analyse Foot", width='stretch')

if not run_btn:
    st.stop()

with st.spinner("Analysing… detecting A4 → measuring foot…"):
    result = pipeline.predict(image_bgr)

report = result["report"]
vis_rgb = cv2.cvtColor(result["vis"], cv2.COLOR_BGR2RGB)

if not result["ok"]:
    st.markdown(
        f'<div class="card"><span class="badge err">❌ {report.status.value.replace("_", " ")}</span>'
        f'<p style="margin-top:.75rem;color:#ff6b35">{result["error"]}</p></div>',
        unsafe_allow_html=True,
    )
    c1, c2 = st.columns(2)
    with c1:
        st.image(vis_rgb, caption="Candidates (red = A4, green = foot)", width='stretch')
    with c2:
        st.code(report.diagnostic_text(), language=None)
    if report.candidates:
        st.dataframe(pd.DataFrame([c.to_dict() for c in report.candidates]),
                     width='stretch', hide_index=True)
    st.stop()

# ── Size Results ────────────────────────────────────────────────────────────
sizes = result["sizes"]
st.markdown(f"""
<div class="metrics-row">
  <div class="metric-chip"><div class="label">Foot Length</div>
    <div class="value">{result["length_mm"]}</div><div class="sub">mm</div></div>
  <div class="metric-chip"><div class="label">Foot Width</div>
    <div class="value">{result["width_mm"]}</div><div class="sub">mm</div></div>
  <div class="metric-chip"><div class="label">UK</div>
    <div class="value">{sizes["uk"]}</div><div class="sub">British</div></div>
  <div class="metric-chip"><div class="label">US (M / W)</div>
    <div class="value">{sizes["us_men"]} / {sizes["us_women"]}</div><div class="sub">American</div></div>
  <div class="metric-chip"><div class="label">EU</div>
    <div class="value">{sizes["eu"]}</div><div class="sub">European</div></div>
</div>
<p style="color:#64748b;font-size:.8rem;margin-top:.75rem">
  Outlines: {result["method"]} &nbsp;|&nbsp; {reference_length_mm:.0f} mm A4 edge used for calibration
</p>
""", unsafe_allow_html=True)

st.image(vis_rgb, caption="A4 (indigo) + foot (green)", width='stretch')

with st.expander("📊 Converse size chart"):
    df = pd.DataFrame(converse_chart())
    df.columns = ["Foot Length (cm)", "US Men", "US Women", "UK", "EU"]

    def highlight_row(row):
        if abs(row["Foot Length (cm)"] - result["length_cm"]) < 0.3:
            return ["background-color: rgba(0,229,160,.15); color: #00e5a0"] * len(row)
        return [""] * len(row)

    st.dataframe(df.style.apply(highlight_row, axis=1),
                 width='stretch', hide_index=True)

# ── Download measurement image ───────────────────────────────────────────────
buf = io.BytesIO()
Image.fromarray(vis_rgb).save(buf, format="PNG")
st.download_button(
    "⬇️ Download Measurement Image",
    data=buf.getvalue(),
    file_name="footscan_result.png",
    mime="image/png",
)
