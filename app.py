import streamlit as st

from nnfield.config import DEFAULT_SEED, MatchConfig
from nnfield.errors import NNFError
from nnfield.pipeline import match_uploads

# ======================
# PAGE CONFIG
# ======================
st.set_page_config(layout="wide")
st.title("PatchMatch Nearest-Neighbor Field")

# ======================
# SIDEBAR PARAMETERS
# ======================
st.sidebar.header("Matcher Parameters")

radius = st.sidebar.slider("Patch Radius", 1, 7, 3)
iterations = st.sidebar.slider("Iterations", 0, 10, 3)
seed = st.sidebar.number_input("Seed", min_value=0, value=DEFAULT_SEED, step=1)
max_size = st.sidebar.slider("Max Image Size", 32, 256, 128, 16)

# ======================
# IMAGE INPUT
# ======================
st.header("Input Images")

col1, col2 = st.columns(2)

with col1:
    source_file = st.file_uploader("Source Image", ["jpg", "png", "jpeg", "bmp"])

with col2:
    target_file = st.file_uploader("Target Image", ["jpg", "png", "jpeg", "bmp"])

# ======================
# RUN
# ======================
if st.button("Run PatchMatch") and source_file and target_file:
    config = MatchConfig(
        radius=radius,
        iterations=iterations,
        seed=int(seed),
        max_size=max_size,
    )

    try:
        with st.spinner("Searching nearest neighbors..."):
            source_img, result, png_bytes = match_uploads(
                source_file.getvalue(), target_file.getvalue(), config
            )
    except NNFError as exc:
        st.error(str(exc))
        st.stop()

    # ======================
    # DISPLAY RESULTS
    # ======================
    st.header("Results")

    colA, colB = st.columns(2)
    with colA:
        st.image(source_img, caption="Source", use_container_width=True)
    with colB:
        st.image(result.output, caption="Rebuilt from target patches", use_container_width=True)

    st.subheader("Field Quality")
    st.table({
        "Metric": list(result.metrics.keys()),
        "Value": [str(v) for v in result.metrics.values()],
    })
    st.caption(f"{result.iterations} iterations in {result.elapsed:.1f}s")

    # ======================
    # DOWNLOAD
    # ======================
    st.download_button(
        label="Download Result Image",
        data=png_bytes,
        file_name="dst.png",
        mime="image/png"
    )
