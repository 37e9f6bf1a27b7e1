"""
Bitplanes Command Line Interface

Usage:
    bitplanes <command> [options]

Commands:
    track       Track a planar template through a video
    config      Write an example configuration file

Examples:
    bitplanes track input.mp4 --roi 120 110 300 230 -o corners.txt
    bitplanes track input.mp4 --select-roi --levels 3 --display
    bitplanes config -o bitplanes_config.json
"""

import sys
import argparse
from dataclasses import replace

from bitplanes import __version__


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='bitplanes',
        description='Bitplanes planar template tracker',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        '-V', '--version',
        action='version',
        version=f'bitplanes {__version__}',
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Track command
    track_parser = subparsers.add_parser(
        'track',
        help='Track a planar template through a video',
    )
    track_parser.add_argument('input', help='Input video file')
    track_parser.add_argument(
        '--roi',
        type=int,
        nargs=4,
        metavar=('X', 'Y', 'W', 'H'),
        help='Template region in the first frame',
    )
    track_parser.add_argument(
        '--select-roi',
        action='store_true',
        help='Select the template region interactively',
    )
    track_parser.add_argument(
        '-c', '--config',
        help='JSON parameter file (BITPLANES_* environment variables also apply)',
    )
    track_parser.add_argument(
        '-l', '--levels',
        type=int,
        default=None,
        help='Number of pyramid levels (-1 = auto)',
    )
    track_parser.add_argument(
        '--max-iterations',
        type=int,
        default=None,
        help='Maximum Gauss-Newton iterations at full resolution',
    )
    track_parser.add_argument(
        '--subsampling',
        type=int,
        default=None,
        help='Process every n-th template pixel',
    )
    track_parser.add_argument(
        '--sigma',
        type=float,
        default=None,
        help='Pre-smoothing sigma (<= 0 disables)',
    )
    track_parser.add_argument(
        '-fs', '--first-frame',
        type=int,
        default=1,
        help='Frame holding the template (default: 1)',
    )
    track_parser.add_argument(
        '-fe', '--frame-end',
        type=int,
        default=None,
        help='Last frame to process (default: end of video)',
    )
    track_parser.add_argument(
        '-o', '--output',
        help='Write tracked corners to this file',
    )
    track_parser.add_argument(
        '--normalize',
        action='store_true',
        help='Write corners normalized to 0-1 by frame size',
    )
    track_parser.add_argument(
        '--display',
        action='store_true',
        help='Show the tracking overlay while running',
    )
    track_parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Print optimizer iterations',
    )
    track_parser.add_argument(
        '-q', '--quiet',
        action='store_true',
        help='Suppress progress output',
    )

    # Config command
    config_parser = subparsers.add_parser(
        'config',
        help='Write an example configuration file',
    )
    config_parser.add_argument(
        '-o', '--output',
        default='bitplanes_config.json',
        help='Output path (default: bitplanes_config.json)',
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == 'track':
        return run_track(args)
    elif args.command == 'config':
        return run_config(args)
    else:
        parser.print_help()
        return 1


def build_parameters(args):
    """Parameters from config file, environment and command-line overrides."""
    from bitplanes.core.config import Parameters, load_config, params_from_env

    params = load_config(args.config) if args.config else Parameters()
    params = params_from_env(params)

    overrides = {}
    if args.levels is not None:
        overrides['num_levels'] = args.levels
    if args.max_iterations is not None:
        overrides['max_iterations'] = args.max_iterations
    if args.subsampling is not None:
        overrides['subsampling'] = args.subsampling
    if args.sigma is not None:
        overrides['sigma'] = args.sigma
    if args.verbose:
        overrides['verbose'] = True

    return replace(params, **overrides)


def run_track(args):
    """Run template tracking command."""
    import cv2

    from bitplanes.core.errors import BitplanesError
    from bitplanes.core.video import VideoReader
    from bitplanes.tracking import PyramidTracker, draw_tracking_result, rect_to_points
    from bitplanes.tracking.track_io import write_persp_file

    if args.roi is None and not args.select_roi:
        print("Error: give a template region with --roi or --select-roi", file=sys.stderr)
        return 2

    try:
        params = build_parameters(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    tracker = PyramidTracker(params)
    corners = {}
    roi = tuple(args.roi) if args.roi else None
    num_tracked = 0
    time_ms = 0.0

    if not args.quiet:
        print(f"Tracking template in {args.input}")

    with VideoReader(args.input, args.first_frame, args.frame_end) as reader:
        props = reader.properties

        for frame_num, frame in reader:
            gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)

            if frame_num == args.first_frame:
                if roi is None:
                    roi = cv2.selectROI("Select template", frame, fromCenter=False, showCrosshair=True)
                    cv2.destroyWindow("Select template")
                try:
                    tracker.set_template(gray, roi)
                except BitplanesError as e:
                    print(f"Error: {e}", file=sys.stderr)
                    return 1
                T = tracker.transform
            else:
                result = tracker.track(gray)
                T = result.transform
                num_tracked += 1
                time_ms += result.time_ms
                if not args.quiet:
                    print(
                        f"\rFrame {frame_num}: {result.status.label}, "
                        f"{result.num_iterations} iterations, {result.time_ms:.1f} ms",
                        end='',
                    )

            corners[frame_num] = rect_to_points(roi, T)

            if args.display:
                cv2.imshow("bitplanes", draw_tracking_result(frame, roi, T))
                if (cv2.waitKey(5) & 0xff) == ord('q'):
                    break

    if args.display:
        cv2.destroyAllWindows()

    if args.output:
        size = (props.width, props.height) if args.normalize else None
        write_persp_file(args.output, corners, size=size)
        if not args.quiet:
            print(f"\nWrote {len(corners)} frames to {args.output}")

    if not args.quiet and num_tracked > 0 and time_ms > 0:
        print(f"\nRuntime: {num_tracked / (time_ms / 1000.0):.1f} Hz")

    return 0


def run_config(args):
    """Write an example configuration file."""
    from bitplanes.core.config import create_example_config
    create_example_config(args.output)
    return 0


if __name__ == '__main__':
    sys.exit(main())
