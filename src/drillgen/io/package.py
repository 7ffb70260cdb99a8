"""
Shared export and packaging logic for generated tools.

Used by the CLI and by library callers to produce the export files of a
generated tool: binary STL (trimesh, from the same mesh a renderer
shows), STEP (from the repaired solid), DXF technical drawing, parameter
JSON and CSV, and the Markdown specification sheet.

Files are produced in memory; ``save_package_to_dir`` writes them to a
directory and ``create_package_zip`` bundles them into one archive.
"""

import io
import logging
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Union

from build123d import Part, export_step

from ..calculator.output import export_basename, to_csv, to_json, to_markdown
from ..core.geometry_repair import simplify_geometry
from ..core.mesh import Mesh
from ..core.projection import project_tool
from ..core.tool import GenerationResult
from ..exceptions import UnsupportedFormatError
from .drawing import export_dxf

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("stl", "step", "dxf", "json", "csv", "md")


def mesh_to_stl_bytes(mesh: Mesh) -> bytes:
    """
    Encode a mesh as binary STL with trimesh.

    The triangles are exactly those of *mesh*, the same mesh a renderer
    shows; facet normals come from the triangle winding.
    """
    return mesh.to_trimesh().export(file_type="stl")


def export_part_step(part: Part, name: str = "tool") -> bytes:
    """Export Part to STEP bytes after a final face merge.

    Args:
        part: build123d Part to export.
        name: Label for log messages.

    Returns:
        STEP file contents as bytes.
    """
    simplified = simplify_geometry(part, name)

    with tempfile.NamedTemporaryFile(suffix=".step", delete=False) as tmp:
        tmp_path = Path(tmp.name)

    try:
        export_step(simplified, str(tmp_path))
        return tmp_path.read_bytes()
    finally:
        tmp_path.unlink(missing_ok=True)


def export_drawing(result: GenerationResult) -> bytes:
    """Project the generated tool and render the DXF drawing."""
    drawing = project_tool(
        result.mesh,
        result.params,
        result.layout,
        paths=result.paths,
        title=export_basename(result.params),
    )
    return export_dxf(drawing)


def _normalise_format(fmt: str) -> str:
    fmt = fmt.lower().lstrip(".")
    if fmt == "stp":
        return "step"
    if fmt == "markdown":
        return "md"
    return fmt


def normalise_formats(formats: Iterable[str]) -> List[str]:
    """Canonical, de-duplicated format keys.

    Raises:
        UnsupportedFormatError: On the first unknown format
    """
    keys: List[str] = []
    for fmt in formats:
        key = _normalise_format(fmt)
        if key not in EXPORT_FORMATS:
            raise UnsupportedFormatError(fmt, EXPORT_FORMATS)
        if key not in keys:
            keys.append(key)
    return keys


def export_tool(result: GenerationResult, fmt: str) -> Union[bytes, str]:
    """
    Export a generated tool in one format.

    Args:
        result: GenerationResult from ToolGeometry.build()
        fmt: One of EXPORT_FORMATS (case-insensitive; "stp" and
            "markdown" are accepted as aliases)

    Returns:
        bytes for stl/step/dxf, str for json/csv/md

    Raises:
        UnsupportedFormatError: For any other format; nothing is produced
    """
    key = _normalise_format(fmt)
    if key not in EXPORT_FORMATS:
        raise UnsupportedFormatError(fmt, EXPORT_FORMATS)

    if key == "stl":
        return mesh_to_stl_bytes(result.mesh)
    if key == "step":
        return export_part_step(result.part, export_basename(result.params))
    if key == "dxf":
        return export_drawing(result)
    if key == "json":
        return to_json(result.params, validation=result.validation)
    if key == "csv":
        return to_csv(result.params)
    return to_markdown(result.params, validation=result.validation)


@dataclass
class PackageFiles:
    """Container for all output files of one generated tool."""

    basename: str
    stl: Optional[bytes] = None
    step: Optional[bytes] = None
    dxf: Optional[bytes] = None
    json: Optional[str] = None
    csv: Optional[str] = None
    md: Optional[str] = None

    def file_map(self) -> Dict[str, Union[bytes, str]]:
        """Filename -> contents for every file that was produced."""
        files = {}
        for fmt in EXPORT_FORMATS:
            data = getattr(self, fmt)
            if data is not None:
                files[f"{self.basename}.{fmt}"] = data
        return files


def generate_package(
    result: GenerationResult,
    formats: Iterable[str] = EXPORT_FORMATS,
    log: Optional[Callable[[str], None]] = None,
) -> PackageFiles:
    """Generate the requested output files for a generated tool.

    Args:
        result: GenerationResult from ToolGeometry.build().
        formats: Formats to produce (subset of EXPORT_FORMATS).
        log: Optional logging callback (e.g. print).

    Returns:
        PackageFiles with all generated file data.

    Raises:
        UnsupportedFormatError: If any format is unknown. Checked before
            anything is exported.
    """
    keys = normalise_formats(formats)
    files = PackageFiles(basename=export_basename(result.params))

    def _log(msg: str):
        if log:
            log(msg)

    for key in keys:
        _log(f"Exporting {key.upper()}...")
        data = export_tool(result, key)
        setattr(files, key, data)
        size = len(data) if isinstance(data, bytes) else len(data.encode("utf-8"))
        _log(f"  {files.basename}.{key}: {size / 1024:.1f} KB")

    return files


def save_package_to_dir(files: PackageFiles, output_dir: Path) -> List[Path]:
    """Write all PackageFiles to a directory with standard naming.

    Args:
        files: PackageFiles from generate_package().
        output_dir: Directory to write files into (created if needed).

    Returns:
        List of Paths written.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []

    for name, data in files.file_map().items():
        path = output_dir / name
        if isinstance(data, bytes):
            path.write_bytes(data)
        else:
            path.write_text(data, encoding="utf-8")
        written.append(path)

    return written


def create_package_zip(files: PackageFiles) -> bytes:
    """Create a ZIP archive from PackageFiles.

    Returns:
        ZIP file contents as bytes.
    """
    buf = io.BytesIO()

    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in files.file_map().items():
            zf.writestr(name, data)

    return buf.getvalue()
