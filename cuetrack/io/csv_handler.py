"""
CSV handling utilities for cuetrack replay

Dataclass-based CSV I/O for offline replay of detector output:
- Observation tables (one row per detection, grouped by frame)
- Track tables (one row per live track per frame)

Provides:
- Type-safe CSV operations with dataclasses
- Automatic CSV header handling
- Data validation through DataLoadError
"""

import csv
from pathlib import Path
from dataclasses import dataclass, asdict, astuple
from typing import List, Dict
from collections import defaultdict

from ..core.exceptions import DataLoadError
from ..core.constants import CSV_OBSERVATION_COLUMNS, CSV_TRACK_COLUMNS
from ..tracking.types import Observation, TrackSnapshot


@dataclass
class ObservationRow:
    """Dataclass for detector observation rows"""
    frame: int
    timestamp: float
    x: float
    y: float
    z: float
    confidence: float

    @classmethod
    def from_dict(cls, d: Dict) -> "ObservationRow":
        """Create instance from dictionary"""
        return cls(
            frame=int(d['frame']),
            timestamp=float(d['timestamp']),
            x=float(d['x']),
            y=float(d['y']),
            z=float(d['z']),
            confidence=float(d['confidence']),
        )

    def to_dict(self) -> Dict:
        """Convert to dictionary"""
        return asdict(self)

    def to_tuple(self) -> tuple:
        """Convert to tuple for CSV writing"""
        return astuple(self)

    def to_observation(self) -> Observation:
        """Convert to a tracker input Observation"""
        return Observation(
            position=(self.x, self.y, self.z),
            confidence=self.confidence,
            timestamp=self.timestamp,
        )


@dataclass
class TrackRow:
    """Dataclass for per-frame track output rows"""
    frame: int
    timestamp: float
    track_id: int
    x: float
    y: float
    z: float
    vx: float
    vy: float
    vz: float
    confidence: float
    state: str
    consecutive_misses: int
    total_detections: int

    @classmethod
    def from_dict(cls, d: Dict) -> "TrackRow":
        """Create instance from dictionary"""
        return cls(
            frame=int(d['frame']),
            timestamp=float(d['timestamp']),
            track_id=int(d['track_id']),
            x=float(d['x']),
            y=float(d['y']),
            z=float(d['z']),
            vx=float(d['vx']),
            vy=float(d['vy']),
            vz=float(d['vz']),
            confidence=float(d['confidence']),
            state=d['state'],
            consecutive_misses=int(d['consecutive_misses']),
            total_detections=int(d['total_detections']),
        )

    @classmethod
    def from_snapshot(cls, frame: int, snapshot: TrackSnapshot) -> "TrackRow":
        """Create instance from a TrackSnapshot"""
        x, y, z = snapshot.position
        vx, vy, vz = snapshot.velocity
        return cls(
            frame=frame,
            timestamp=snapshot.timestamp,
            track_id=snapshot.id,
            x=x, y=y, z=z,
            vx=vx, vy=vy, vz=vz,
            confidence=snapshot.confidence,
            state=snapshot.state.status.value,
            consecutive_misses=snapshot.consecutive_misses,
            total_detections=snapshot.total_detections,
        )

    def to_dict(self) -> Dict:
        """Convert to dictionary"""
        return asdict(self)

    def to_tuple(self) -> tuple:
        """Convert to tuple for CSV writing"""
        return astuple(self)


class CSVWriter:
    """Unified CSV writing for observation and track tables"""

    @staticmethod
    def write_observations(output_path: str, observations: List[ObservationRow]) -> None:
        """
        Write observation rows to CSV

        Args:
            output_path: Path to output CSV file
            observations: List of ObservationRow instances
        """
        CSVWriter._write(output_path, CSV_OBSERVATION_COLUMNS, observations)

    @staticmethod
    def write_tracks(output_path: str, tracks: List[TrackRow]) -> None:
        """
        Write track rows to CSV

        Args:
            output_path: Path to output CSV file
            tracks: List of TrackRow instances

        Example:
            >>> from cuetrack.io import CSVWriter, TrackRow
            >>> rows = [TrackRow.from_snapshot(0, s) for s in frame]
            >>> CSVWriter.write_tracks('tracks.csv', rows)
        """
        CSVWriter._write(output_path, CSV_TRACK_COLUMNS, tracks)

    @staticmethod
    def _write(output_path: str, columns: List[str], rows: List) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(columns)

            for row in rows:
                writer.writerow(row.to_tuple())


class CSVReader:
    """Unified CSV reading for observation and track tables"""

    @staticmethod
    def read_observations(
        csv_path: str,
        conf_threshold: float = 0.0
    ) -> Dict[int, List[ObservationRow]]:
        """
        Read observations from CSV, grouped by frame number

        Args:
            csv_path: Path to observation CSV file
            conf_threshold: Minimum confidence threshold

        Returns:
            Dictionary mapping frame number to list of ObservationRow,
            in ascending frame order

        Raises:
            DataLoadError: If CSV cannot be read

        Example:
            >>> from cuetrack.io import CSVReader
            >>> frames = CSVReader.read_observations('observations.csv', conf_threshold=0.1)
            >>> for frame_num, rows in frames.items():
            ...     print(f"Frame {frame_num}: {len(rows)} observations")
        """
        csv_path = Path(csv_path)

        if not csv_path.exists():
            raise DataLoadError(f"CSV file not found: {csv_path}")

        observations_by_frame = defaultdict(list)

        try:
            with open(csv_path, 'r', newline='') as f:
                reader = csv.DictReader(f)

                for row in reader:
                    obs = ObservationRow.from_dict(row)
                    if obs.confidence < conf_threshold:
                        continue
                    observations_by_frame[obs.frame].append(obs)

        except (KeyError, TypeError, ValueError, csv.Error) as e:
            raise DataLoadError(f"Failed to read observation CSV: {e}")

        return dict(sorted(observations_by_frame.items()))

    @staticmethod
    def read_tracks(csv_path: str) -> Dict[int, List[TrackRow]]:
        """
        Read track rows from CSV, grouped by frame number

        Args:
            csv_path: Path to track CSV file

        Returns:
            Dictionary mapping frame number to list of TrackRow

        Raises:
            DataLoadError: If CSV cannot be read
        """
        csv_path = Path(csv_path)

        if not csv_path.exists():
            raise DataLoadError(f"CSV file not found: {csv_path}")

        tracks_by_frame = defaultdict(list)

        try:
            with open(csv_path, 'r', newline='') as f:
                reader = csv.DictReader(f)

                for row in reader:
                    track = TrackRow.from_dict(row)
                    tracks_by_frame[track.frame].append(track)

        except (KeyError, TypeError, ValueError, csv.Error) as e:
            raise DataLoadError(f"Failed to read track CSV: {e}")

        return dict(tracks_by_frame)
