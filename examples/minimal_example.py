#!/usr/bin/env python3
"""
Minimal Example: Bitplanes API Usage
====================================

Shows the essential API calls without extra boilerplate.
This is the "quick reference" version.
"""

import cv2

from bitplanes import Parameters, PyramidTracker
from bitplanes.core.timer import time_code
from bitplanes.core.video import VideoReader
from bitplanes.tracking import draw_tracking_result, rect_to_points, write_persp_file


# =============================================================================
# STEP 1: TRACKING
# Equivalent to: bitplanes track input.mp4 --roi 120 110 300 230 -l 3 \
#                -o input_corners.txt --display
# =============================================================================

input_video = "input.mp4"
first_frame = 1
roi = (120, 110, 300, 230)  # x, y, width, height

params = Parameters(
    num_levels=3,
    max_iterations=50,
    parameter_tolerance=1e-5,
    function_tolerance=1e-4,
)
tracker = PyramidTracker(params)

reader = VideoReader(input_video, first_frame=first_frame)
reader.open()
props = reader.properties

corners = {}
for frame_num, frame in reader:
    gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)

    if frame_num == first_frame:
        tracker.set_template(gray, roi)
        T = tracker.transform
    else:
        result = tracker.track(gray)  # warm-started from the previous frame
        T = result.transform
        print(f"frame {frame_num}: {result.status.label} "
              f"({result.num_iterations} iterations, {result.time_ms:.1f} ms)")

    corners[frame_num] = rect_to_points(roi, T)

    cv2.imshow("bitplanes", draw_tracking_result(frame, roi, T))
    if (cv2.waitKey(5) & 0xff) == ord('q'):
        break

reader.close()
cv2.destroyAllWindows()

# Corners normalized to 0-1 for stabilization tools
write_persp_file("input_corners.txt", corners, size=(props.width, props.height))
print("Track file created: input_corners.txt")


# =============================================================================
# STEP 2: TIMING
# Average per-frame cost of tracking the template frame against itself
# =============================================================================

with VideoReader(input_video, first_frame=first_frame) as reader:
    _, frame = next(iter(reader))

gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
tracker.set_template(gray, roi)
ms = time_code(100, tracker.track, gray)
print(f"Tracking runtime: {1000.0 / ms:.1f} Hz")
