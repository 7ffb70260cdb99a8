"""
Command-line interface for cutting tool generation.
"""

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from ..calculator.output import to_summary
from ..calculator.presets import get_preset
from ..calculator.core import calculate_derived_quantities
from ..calculator.validation import Severity, validate_parameters
from ..enums import FluteProfile, ToolType
from ..exceptions import ParameterValidationError, UnsupportedFormatError
from ..io.loaders import (
    GenerationSettings,
    ToolParameters,
    load_parameters_json,
    parameters_to_dict,
    save_parameters_json,
)

# CLI flag -> ToolParameters field
PARAMETER_OVERRIDES = {
    'diameter': 'diameter',
    'shank_diameter': 'shank_diameter',
    'length': 'length',
    'shank_length': 'shank_length',
    'flute_length': 'flute_length',
    'flutes': 'flute_count',
    'tip_angle': 'tip_angle',
    'helix_angle': 'helix_angle',
    'tolerance': 'tolerance',
    'material': 'material',
    'finish': 'surface_finish',
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='drillgen',
        description="Generate STL, STEP and DXF files for parametric rotary cutting tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default drill (10 x 100 mm, 2 flutes) - all formats into the current directory
  drillgen

  # Endmill preset with 3 flutes and a 45° helix
  drillgen --type endmill --flutes 3 --helix-angle 45

  # Parameters from JSON (as saved with --save-json or exported as .json)
  drillgen tool.json -o out/

  # Only the mesh and the drawing, bundled in a ZIP
  drillgen --type reamer --formats stl dxf --zip

  # Validate and print derived dimensions without building geometry
  drillgen --type step-drill --length 80 --dry-run

  # Use the build123d algebra boolean instead of the OCCT cut
  drillgen --boolean-backend algebra
        """
    )

    parser.add_argument(
        'params_file',
        nargs='?',
        type=str,
        default=None,
        help='JSON parameter file (default: preset for --type)'
    )

    parser.add_argument(
        '-t', '--type',
        type=str,
        choices=[t.value for t in ToolType],
        default=None,
        help='Tool type preset (default: drill, or the type in the parameter file)'
    )

    parser.add_argument(
        '-o', '--output-dir',
        type=str,
        default='.',
        help='Output directory (default: current directory)'
    )

    parser.add_argument(
        '--formats',
        nargs='+',
        default=['stl', 'step', 'dxf', 'json', 'csv', 'md'],
        help='Export formats: stl step dxf json csv md (default: all)'
    )

    parser.add_argument(
        '--zip',
        action='store_true',
        help='Write a single ZIP archive instead of separate files'
    )

    # Parameter overrides
    overrides = parser.add_argument_group('parameter overrides')
    overrides.add_argument('--diameter', type=float, help='Cutting diameter in mm')
    overrides.add_argument('--shank-diameter', type=float, help='Shank diameter in mm')
    overrides.add_argument('--length', type=float, help='Overall length in mm')
    overrides.add_argument('--shank-length', type=float, help='Shank length in mm')
    overrides.add_argument('--flute-length', type=float, help='Flute length in mm (including tip)')
    overrides.add_argument('--flutes', type=int, help='Number of flutes (1-4)')
    overrides.add_argument('--tip-angle', type=float, help='Point angle in degrees (180 = flat)')
    overrides.add_argument('--helix-angle', type=float, help='Helix angle in degrees (0 = straight)')
    overrides.add_argument('--tolerance', type=str, help='Tolerance class, e.g. h8 or H7')
    overrides.add_argument('--material', type=str, help='hss, carbide, cobalt or titanium')
    overrides.add_argument('--finish', type=str, help='polished, black-oxide, tin or aln')

    # Generation settings
    settings = parser.add_argument_group('generation settings')
    settings.add_argument(
        '--boolean-backend',
        type=str,
        choices=['occt', 'algebra'],
        default='occt',
        help='Boolean engine for the flute cut (default: occt)'
    )
    settings.add_argument(
        '--fuzzy',
        type=float,
        default=None,
        help='OCCT boolean fuzzy tolerance in mm (default: off)'
    )
    settings.add_argument(
        '--profile',
        type=str,
        choices=[p.value for p in FluteProfile],
        default=FluteProfile.CIRCLE.value,
        help='Flute cross-section (default: circle)'
    )
    settings.add_argument(
        '--no-repair',
        action='store_true',
        help='Skip topology repair after the flute cut'
    )

    parser.add_argument(
        '--save-json',
        type=str,
        default=None,
        help='Save the resolved parameters (clamped length, recomputed non-cutting length) to JSON'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Validate and print the summary without generating geometry'
    )

    parser.add_argument(
        '-q', '--quiet',
        action='store_true',
        help='Only print errors'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Debug logging'
    )

    return parser


def load_parameters(args) -> ToolParameters:
    """Parameter file or preset, with command-line overrides applied."""
    if args.params_file:
        data = parameters_to_dict(load_parameters_json(args.params_file))
        if args.type:
            data['tool_type'] = args.type
    else:
        data = get_preset(args.type or ToolType.DRILL.value)

    for flag, field_name in PARAMETER_OVERRIDES.items():
        value = getattr(args, flag)
        if value is not None:
            data[field_name] = value

    return ToolParameters.model_validate(data)


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else (logging.ERROR if args.quiet else logging.WARNING),
        format='%(levelname)s %(name)s: %(message)s',
    )

    def out(msg: str = ""):
        if not args.quiet:
            print(msg)

    try:
        params = load_parameters(args)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (ValidationError, ValueError) as e:
        print(f"Error: invalid parameters: {e}", file=sys.stderr)
        return 1

    settings = GenerationSettings(
        show_notifications=not args.quiet,
        boolean_backend=args.boolean_backend,
        fuzzy_value=args.fuzzy,
        flute_profile=args.profile,
        repair=not args.no_repair,
    )

    out(to_summary(params))

    if args.dry_run:
        validation = validate_parameters(params)
        derived = calculate_derived_quantities(params)
        out(f"\n  Minimum length: {derived.minimum_length} mm")
        out(f"  Non-cutting length: {derived.non_cutting_length:g} mm")
        out(f"  Chamfer height: {derived.chamfer_height:.3f} mm")
        out(f"  Tip height: {derived.tip_height:.3f} mm")
        for msg in validation.messages:
            stream = sys.stderr if msg.severity == Severity.ERROR else sys.stdout
            if msg.severity == Severity.ERROR or not args.quiet:
                print(f"  [{msg.severity.value.upper()}] {msg.code}: {msg.message}", file=stream)
        return 0 if validation.valid else 1

    # Geometry imports are deferred so --help and --dry-run stay fast
    from ..core.tool import ToolGeometry
    from ..io.package import create_package_zip, generate_package, normalise_formats, save_package_to_dir

    try:
        formats = normalise_formats(args.formats)
    except UnsupportedFormatError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    def notify(message: str):
        print(f"  Note: {message}")

    out("\nGenerating geometry...")
    try:
        result = ToolGeometry(params, settings=settings, notify=notify).build()
    except ParameterValidationError as e:
        print("Error: parameters failed validation:", file=sys.stderr)
        for msg in e.result.errors:
            print(f"  {msg.code}: {msg.message}", file=sys.stderr)
            if msg.suggestion:
                print(f"    Suggestion: {msg.suggestion}", file=sys.stderr)
        return 1

    out(f"  Status: {result.status.value}")
    out(f"  Volume: {result.part.volume:.2f} mm³, {result.mesh.triangle_count} triangles")
    out(f"  Time: {result.timings.get('total', 0.0):.1f}s")

    files = generate_package(result, formats=formats, log=out)

    output_dir = Path(args.output_dir)
    if args.zip:
        output_dir.mkdir(parents=True, exist_ok=True)
        zip_path = output_dir / f"{files.basename}.zip"
        zip_path.write_bytes(create_package_zip(files))
        out(f"\nSaved {zip_path}")
    else:
        written = save_package_to_dir(files, output_dir)
        out("")
        for path in written:
            out(f"Saved {path}")

    if args.save_json:
        output_path = Path(args.save_json)
        save_parameters_json(result.params, output_path)
        out(f"\nSaved parameters: {output_path}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
