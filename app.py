"""
SVG-to-CAD Converter - Streamlit Application

Converts SVG drawings into Onshape sketch and feature definitions, with a
DXF preview of the synthesized sketches.
"""

import json
import logging

import streamlit as st

from svg_to_cad.config import MAX_FILE_SIZE_MB, SUPPORTED_FILE_TYPES, ConversionOptions
from svg_to_cad.converter import convert_svg
from svg_to_cad.dxf_export import SketchDXFExporter
from svg_to_cad.extractors import SVGParseError

logging.basicConfig(level=logging.INFO)


def main():
    st.set_page_config(page_title="SVG to CAD", layout="wide")
    st.title("SVG to CAD Converter")

    # Sidebar
    with st.sidebar:
        st.header("Settings")

        st.subheader("Units & Plane")
        target_units = st.radio("Target units", ["mm", "inch"], horizontal=True)
        sketch_plane = st.selectbox("Sketch plane", ["Top", "Front", "Right"])
        sketch_grouping = st.selectbox(
            "Sketch grouping",
            ["path", "group", "single"],
            help="One sketch per path, per <g> group, or one sketch for everything"
        )

        st.divider()

        st.subheader("Curves")
        approximate_curves = st.checkbox(
            "Flatten curves to lines",
            value=True,
            help="Replace Beziers and arcs with line segments"
        )
        curve_resolution = st.number_input(
            "Curve resolution",
            min_value=0.01,
            value=0.5,
            step=0.1,
            help="Target segment length when flattening"
        )

        st.subheader("Paths")
        close_path_tolerance = st.number_input("Close tolerance", min_value=0.0, value=0.1, step=0.05)
        auto_close_paths = st.checkbox("Auto-close paths", value=True)
        dashed_as_construction = st.checkbox(
            "Dashed lines are construction",
            value=True,
            help="Strokes with a dash pattern become construction geometry"
        )

        st.subheader("3D")
        create_3d = st.checkbox(
            "Create features from directives",
            value=True,
            help="Honor #extrude, #revolve, #pattern and #mirror in element names"
        )

    uploaded = st.file_uploader(
        "Upload an SVG drawing",
        type=SUPPORTED_FILE_TYPES,
        help=f"Max {MAX_FILE_SIZE_MB}MB"
    )

    if uploaded is None:
        st.info("Upload an SVG file to begin")
        return

    content = uploaded.getvalue()
    if len(content) > MAX_FILE_SIZE_MB * 1024 * 1024:
        st.error(f"File exceeds {MAX_FILE_SIZE_MB}MB")
        return

    if st.button("Convert", type="primary"):
        options = ConversionOptions(
            target_units=target_units,
            sketch_plane=sketch_plane,
            sketch_grouping=sketch_grouping,
            approximate_curves=approximate_curves,
            curve_resolution=curve_resolution,
            close_path_tolerance=close_path_tolerance,
            auto_close_paths=auto_close_paths,
            dashed_lines_as_construction=dashed_as_construction,
            create_3d=create_3d,
        )
        with st.spinner("Converting..."):
            try:
                result = convert_svg(content, options)
            except SVGParseError as e:
                st.error(f"Could not parse SVG: {e}")
                return

            exporter = SketchDXFExporter()
            st.session_state["result"] = result
            st.session_state["dxf"] = exporter.generate(result)

        summary = result.summary
        st.success(
            f"Created {summary['sketches']} sketches with {summary['entities']} entities "
            f"and {summary['features']} features"
        )

    # Results
    if "result" in st.session_state:
        result = st.session_state["result"]
        dxf_bytes = st.session_state.get("dxf")
        features = result.to_onshape_features()

        st.divider()

        col_a, col_b = st.columns(2)

        with col_a:
            st.subheader("Sketches")

            if result.sketches:
                for sketch in result.sketches:
                    counts = ", ".join(f"{k}: {v}" for k, v in sketch.entity_counts.items())
                    st.write(f"- **{sketch.name}** ({sketch.plane}) {counts}")
            else:
                st.warning("No sketches created")

            if result.features:
                st.subheader("Features")
                for feature in result.features:
                    st.write(f"- {feature.name} ({feature.kind})")

            if result.warnings or result.errors:
                issues = result.warnings + result.errors
                with st.expander(f"Warnings & Errors ({len(issues)})"):
                    for issue in issues:
                        st.write(f"- {issue}")

            with st.expander("Onshape features JSON"):
                st.json(features)

        with col_b:
            st.subheader("Download")

            st.download_button(
                "Download Onshape JSON",
                data=json.dumps(features, indent=2),
                file_name="onshape_features.json",
                mime="application/json"
            )

            if dxf_bytes:
                st.download_button(
                    "Download DXF preview",
                    data=dxf_bytes,
                    file_name="preview.dxf",
                    mime="application/dxf"
                )

            st.download_button(
                "Download conversion JSON",
                data=result.model_dump_json(indent=2),
                file_name="conversion.json",
                mime="application/json"
            )


if __name__ == "__main__":
    main()
