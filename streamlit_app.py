"""
Tile Mosaic - web edition

Run with:
    streamlit run streamlit_app.py
"""

from __future__ import annotations

import io
import time

import numpy as np
import streamlit as st
from PIL import Image, ImageDraw

from tile_mosaic.config import MosaicConfig
from tile_mosaic.errors import MosaicError
from tile_mosaic.generator import get_layout_generator
from tile_mosaic.image_io import (
    clamp_output_size,
    encode_mosaic,
    input_digest,
    render_mosaic,
)

# -- Page config -------------------------------------------------------
st.set_page_config(
    page_title="Tile Mosaic",
    page_icon=None,
    layout="wide",
    initial_sidebar_state="collapsed",
)

_DEFAULTS = MosaicConfig()
_PREVIEW_SIZE = 768
_UPLOAD_TYPES = ["jpg", "jpeg", "png", "webp", "bmp", "jfif"]

# -- CSS ---------------------------------------------------------------
st.markdown("""
<style>
    .stApp {
        background-color: #faf9f6;
        color: #2a2a2a;
        font-family: 'Inter', 'Helvetica Neue', sans-serif;
    }
    .block-container {
        max-width: 1000px;
        padding-top: 3.5rem;
        padding-bottom: 4rem;
    }
    .gallery-title {
        font-family: 'Georgia', serif;
        font-size: 2.6rem;
        font-weight: 300;
        text-align: center;
        border-bottom: 1px solid #1a1a1a;
        padding-bottom: 0.6rem;
        margin-bottom: 0.5rem;
    }
    .gallery-subtitle {
        font-size: 0.75rem;
        font-weight: 300;
        line-height: 1.8;
        margin-bottom: 2.5rem;
    }
    .label-detail {
        font-family: 'Georgia', serif;
        font-size: 0.85rem;
        font-style: italic;
        color: #a0a09a;
        text-align: center;
    }
    .stButton > button, .stDownloadButton > button {
        border-radius: 0px !important;
        letter-spacing: 0.10em;
        text-transform: uppercase;
        font-size: 0.6rem;
    }
</style>
""", unsafe_allow_html=True)


# -- Helpers -----------------------------------------------------------

def _add_passepartout(img: Image.Image, border: int = 20) -> Image.Image:
    w, h = img.size
    canvas = Image.new("RGB", (w + border * 2, h + border * 2), (250, 249, 246))
    canvas.paste(img, (border, border))
    draw = ImageDraw.Draw(canvas)
    draw.rectangle(
        [border - 1, border - 1, border + w, border + h],
        outline=(224, 222, 216), width=1,
    )
    return canvas


def _open(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data)).convert("RGB")


def _set_grid_size(size: int) -> None:
    st.session_state.grid_size = size


# -- Title -------------------------------------------------------------
st.markdown('<div class="gallery-title">Tile Mosaic</div>', unsafe_allow_html=True)
st.markdown(
    '<div class="gallery-subtitle">'
    "Upload a main image and a handful of your own photos. Every photo is "
    "reduced to its average colour, the main image is split into a square "
    "grid, and each grid cell receives the photo whose colour fits it best. "
    "Every photo gets its best spot first; after that, photos that are "
    "already used often are penalised so the mosaic stays varied."
    "</div>",
    unsafe_allow_html=True,
)

# -- Uploads -----------------------------------------------------------
up1, up2 = st.columns(2)
with up1:
    main_upload = st.file_uploader("Main image", type=_UPLOAD_TYPES)
with up2:
    tile_uploads = st.file_uploader(
        "Tile images", type=_UPLOAD_TYPES, accept_multiple_files=True,
    )

# The uploaders keep their files across reruns; removing a file drops it.
main_data: bytes | None = main_upload.getvalue() if main_upload is not None else None
tile_data: list[bytes] = [f.getvalue() for f in tile_uploads or []]
digest = input_digest(main_data, tile_data)

# A layout is only valid for the exact inputs it was generated from
if st.session_state.get("layout_digest") != digest:
    st.session_state.layout = None

# -- Controls ----------------------------------------------------------
if "grid_size" not in st.session_state:
    st.session_state.grid_size = _DEFAULTS.grid_size

ctrl1, ctrl2 = st.columns(2)
with ctrl1:
    st.slider(
        "Grid size",
        _DEFAULTS.min_grid_size, _DEFAULTS.max_grid_size,
        key="grid_size",
    )
    preset_cols = st.columns(len(_DEFAULTS.grid_presets))
    for col, preset in zip(preset_cols, _DEFAULTS.grid_presets, strict=False):
        col.button(
            f"{preset} x {preset}", use_container_width=True,
            on_click=_set_grid_size, args=(preset,),
        )
with ctrl2:
    overlay = st.slider(
        "Main image overlay", 0.0, 1.0, _DEFAULTS.overlay_opacity, step=0.01,
    )

grid_size = _DEFAULTS.clamp_grid_size(st.session_state.grid_size)
can_generate = main_data is not None and len(tile_data) >= _DEFAULTS.min_tiles

if main_data is None or len(tile_data) < _DEFAULTS.min_tiles:
    st.info(
        f"Upload a main image and at least {_DEFAULTS.min_tiles} tile images "
        "to begin."
    )

if st.button("GENERATE", type="primary", use_container_width=True,
             disabled=not can_generate):
    try:
        t0 = time.perf_counter()
        layout = get_layout_generator(_DEFAULTS).generate(
            io.BytesIO(main_data), [io.BytesIO(d) for d in tile_data], grid_size,
        )
        elapsed = time.perf_counter() - t0
    except MosaicError as exc:
        st.session_state.layout = None
        st.error(f"Generation failed: {exc}")
    else:
        st.session_state.layout = layout
        st.session_state.layout_digest = digest
        st.session_state.elapsed = elapsed

layout = st.session_state.get("layout")
if layout is not None and can_generate:
    main_img = _open(main_data)
    tiles = [_open(d) for d in tile_data]

    st.markdown("---")
    preview = render_mosaic(
        layout, tiles, _PREVIEW_SIZE, main_image=main_img, overlay_opacity=overlay,
    )
    st.image(_add_passepartout(preview, border=28), use_container_width=True)

    usage = np.bincount(layout.ravel(), minlength=len(tiles))
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Grid", f"{layout.shape[1]} × {layout.shape[0]}")
    m2.metric("Tiles used", f"{int(np.count_nonzero(usage))} / {len(tiles)}")
    m3.metric("Max reuse", f"{int(usage.max())}")
    m4.metric("Time", f"{st.session_state.elapsed:.2f} s")

    # -- Export --------------------------------------------------------
    ex1, ex2 = st.columns(2)
    with ex1:
        out_size = st.number_input(
            "Export size (px)",
            _DEFAULTS.min_output_size, _DEFAULTS.max_output_size,
            _DEFAULTS.output_size, step=128,
        )
    with ex2:
        fmt = st.radio("Format", ["jpeg", "png"], horizontal=True)

    out_size = clamp_output_size(out_size, _DEFAULTS)
    if st.button("PREPARE DOWNLOAD", use_container_width=True):
        full = render_mosaic(
            layout, tiles, out_size, main_image=main_img, overlay_opacity=overlay,
        )
        ext = "jpg" if fmt == "jpeg" else "png"
        st.download_button(
            "SAVE MOSAIC",
            data=encode_mosaic(full, fmt, _DEFAULTS.jpeg_quality),
            file_name=f"tile-mosaic-{out_size}x{out_size}.{ext}",
            mime=f"image/{fmt}",
            use_container_width=True,
        )

    st.markdown('<div class="label-detail">Input images</div>', unsafe_allow_html=True)
    thumbs = st.columns(min(8, len(tiles) + 1))
    thumbs[0].image(main_img, use_container_width=True, caption="Main")
    for i, tile in enumerate(tiles[: len(thumbs) - 1], 1):
        thumbs[i].image(tile, use_container_width=True, caption=f"#{i - 1}")
