#!/usr/bin/env python3
"""
Multi-Body Pose Tracking

Runs one or more video files through a pose landmark detector and tracks each
detected body with a stable identity and per-landmark history. Every video
is treated as its own sender.
"""

import argparse
import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from tqdm import tqdm

from pose_tracking.detector.base import PoseDetector
from pose_tracking.tracker.pipeline import PosePipeline
from pose_tracking.tracker.pose_registry import TrackEvent
from pose_tracking.utils.config import TrackingConfig
from pose_tracking.utils.video_source import VideoFeed

logger = logging.getLogger("pose_tracking")

VERBOSITY_LEVELS = {
    "errors": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def parse_arguments(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description='Multi-Body Pose Tracking')

    # Input
    parser.add_argument('--video', type=str, action='append', required=True,
                        help='Path to a video file. Repeat for multiple feeds')
    parser.add_argument('--sender_id', type=str, action='append', default=None,
                        help='Sender id for each --video, in order (default: file stem)')

    # Model options
    parser.add_argument('--model_path', type=str, default='pose_landmarker_full.task',
                        help='Path to the MediaPipe pose landmarker model bundle')
    parser.add_argument('--num_poses', type=int, default=5,
                        help='Maximum number of bodies per frame')
    parser.add_argument('--min_confidence', type=float, default=0.3,
                        help='Minimum detection/presence/tracking confidence (0.0-1.0)')

    # Tracking options (override --config)
    parser.add_argument('--config', type=str, default=None,
                        help='YAML file with tracking options')
    parser.add_argument('--distance_threshold', type=float, default=None,
                        help='Maximum torso-centroid displacement to keep a pose id (normalized units)')
    parser.add_argument('--matcher_age_threshold_ms', type=float, default=None,
                        help='Prune matcher identities unseen for this long')
    parser.add_argument('--registry_max_age_ms', type=float, default=None,
                        help='Evict tracks not updated for this long')
    parser.add_argument('--sample_limit', type=int, default=None,
                        help='Historical samples kept per landmark')
    parser.add_argument('--eviction_tick_ms', type=float, default=None,
                        help='Interval between eviction scans')

    # Output options
    parser.add_argument('--output_dir', type=str, default='outputs',
                        help='Directory to save the summary')
    parser.add_argument('--max_frames', type=int, default=0,
                        help='Maximum number of frames to process per feed (0 for all)')
    parser.add_argument('--verbosity', type=str, default='errors',
                        choices=sorted(VERBOSITY_LEVELS),
                        help='Logging verbosity')

    return parser.parse_args(argv)


def setup_logging(verbosity: str) -> None:
    logging.basicConfig(
        level=VERBOSITY_LEVELS.get(verbosity, logging.WARNING),
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
    )


def build_config(args) -> TrackingConfig:
    """Tracking config from the optional YAML file, with command-line overrides."""
    config = TrackingConfig.from_yaml(args.config) if args.config else TrackingConfig()
    return config.with_overrides(
        distance_threshold=args.distance_threshold,
        matcher_age_threshold_ms=args.matcher_age_threshold_ms,
        registry_max_age_ms=args.registry_max_age_ms,
        sample_limit=args.sample_limit,
        eviction_tick_ms=args.eviction_tick_ms,
    )


def open_feeds(args) -> List[VideoFeed]:
    sender_ids = args.sender_id or []
    feeds = []
    for i, path in enumerate(args.video):
        sender_id = sender_ids[i] if i < len(sender_ids) else None
        feeds.append(VideoFeed.from_path(path, sender_id))
    if len({f.sender_id for f in feeds}) != len(feeds):
        raise ValueError("Sender ids must be unique; pass --sender_id for each --video")
    return feeds


def initialize_detectors(args, feeds: List[VideoFeed]) -> Dict[str, PoseDetector]:
    """One detector per feed, since VIDEO mode needs increasing timestamps per stream."""
    from pose_tracking.detector.mediapipe_detector import MediaPipePoseDetector

    logger.info(f"Using pose landmarker model: {args.model_path}")
    return {
        feed.sender_id: MediaPipePoseDetector(
            model_path=args.model_path,
            num_poses=args.num_poses,
            min_pose_detection_confidence=args.min_confidence,
            min_pose_presence_confidence=args.min_confidence,
            min_tracking_confidence=args.min_confidence,
        )
        for feed in feeds
    }


def process_videos(args) -> Dict:
    """
    Main processing loop.

    Args:
        args: Command line arguments

    Returns:
        Statistics dictionary
    """
    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    config = build_config(args)
    feeds = open_feeds(args)
    detectors = initialize_detectors(args, feeds)

    stats = {
        'total_frames': 0,
        'processing_time': 0.0,
        'fps': 0.0,
        'total_observations': 0,
        'added': 0,
        'expired': 0,
        'unique_guids': set(),
    }

    def on_added(event: TrackEvent) -> None:
        stats['added'] += 1
        logger.info(f"Pose added: {event.track.guid}")

    def on_expired(event: TrackEvent) -> None:
        stats['expired'] += 1
        logger.info(f"Pose expired: {event.track.guid}")

    pipeline = PosePipeline(config)
    pipeline.registry.on_added(on_added)
    pipeline.registry.on_expired(on_expired)

    total = max((f.frame_count for f in feeds), default=0)
    if args.max_frames > 0:
        total = min(total, args.max_frames) if total > 0 else args.max_frames

    start_time = time.time()
    active = list(feeds)
    frame_idx = 0
    try:
        with pipeline, tqdm(total=total, desc="Processing frames") as pbar:
            while active:
                for feed in list(active):
                    ok, frame, timestamp = feed.read_frame()
                    if not ok:
                        active.remove(feed)
                        continue
                    observations = detectors[feed.sender_id].detect(frame, timestamp)
                    guids = pipeline.process_frame(feed.sender_id, observations, timestamp)

                    stats['total_frames'] += 1
                    stats['total_observations'] += len(observations)
                    stats['unique_guids'].update(guids)

                frame_idx += 1
                pbar.update(1)
                pbar.set_postfix({
                    'tracks': pipeline.registry.size,
                    'poses': len(stats['unique_guids']),
                })
                if args.max_frames > 0 and frame_idx >= args.max_frames:
                    break
    finally:
        for detector in detectors.values():
            detector.close()
        for feed in feeds:
            feed.release()

    stats['processing_time'] = time.time() - start_time
    stats['fps'] = stats['total_frames'] / stats['processing_time'] if stats['processing_time'] > 0 else 0
    stats['unique_guids'] = sorted(stats['unique_guids'])

    save_summary(output_dir, pipeline, config, stats)
    print(f"\nProcessing complete. Results saved to: {output_dir}")
    print(f"Processed {stats['total_frames']} frames at {stats['fps']:.2f} FPS")
    print(f"Tracked {len(stats['unique_guids'])} unique poses")
    return stats


def save_summary(output_dir: Path, pipeline: PosePipeline, config: TrackingConfig, stats: Dict) -> Path:
    """
    Save tracking summary to a JSON file.

    Args:
        output_dir: Directory to save summary
        pipeline: PosePipeline instance
        config: Tracking config used for the run
        stats: Dictionary of tracking statistics

    Returns:
        Path of the written summary
    """
    registry = pipeline.registry
    summary = {
        'timestamp': datetime.now().isoformat(),
        'config': config.to_dict(),
        'processing_time_seconds': stats.get('processing_time', 0),
        'total_frames': stats.get('total_frames', 0),
        'processing_fps': stats.get('fps', 0),
        'total_observations': stats.get('total_observations', 0),
        'poses_added': stats.get('added', 0),
        'poses_expired': stats.get('expired', 0),
        'unique_poses': len(stats.get('unique_guids', [])),
        'sender_ids': registry.get_sender_ids(),
        'identities_per_sender': {
            sender_id: len(matcher) for sender_id, matcher in pipeline.matchers.items()
        },
        'active_poses': [
            {
                'guid': track.guid,
                'sender_id': track.sender_id,
                'pose_id': track.pose_id,
                'middle': list(track.middle),
                'width': track.width,
                'height': track.height,
            }
            for track in registry.get_by_horizontal()
        ],
    }

    summary_path = Path(output_dir) / 'summary.json'
    with open(summary_path, 'w') as f:
        json.dump(summary, f, indent=2, default=str)

    logger.info(f"Summary saved to: {summary_path}")
    return summary_path


def main(argv: Optional[List[str]] = None):
    args = parse_arguments(argv)
    setup_logging(args.verbosity)
    process_videos(args)


if __name__ == "__main__":
    main()
