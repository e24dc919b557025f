"""RingLifecycleController, a thin orchestrator that delegates to focused modules."""

import logging
import pathlib
from enum import Enum
from typing import Optional

import trimesh

from . import planner
from .constants import TEXTURE_DIR, OUTPUT_DIR
from .errors import RingWorldError
from .models import GenerationResult, RingConfiguration, Segment
from .proximity import ProximityLODScheduler, ProximityState
from .registry import SegmentRegistry
from .scene import InMemorySceneHost
from .segments import SegmentFactory
from .terrain import FractalNoiseSampler
from .textures import delete_previous_texture_files, export_segment_texture

logger = logging.getLogger(__name__)


class LifecycleState(str, Enum):
    idle = "idle"
    generating = "generating"


class RingLifecycleController:
    def __init__(self, config: Optional[RingConfiguration] = None,
                 sampler=None, scene_host=None, progress=None,
                 texture_dir=TEXTURE_DIR, playing: bool = False):
        """
        config: ring configuration; defaults to ``RingConfiguration()``.
        sampler: terrain sampler; when omitted a ``FractalNoiseSampler`` is
            rebuilt from the configuration on every generation.
        scene_host: opaque scene graph; defaults to ``InMemorySceneHost``.
        progress: optional ProgressReporter consulted after each segment.
        texture_dir: directory for exported PNG textures.
        playing: True while the host is in playback mode; suppresses
            ``auto_update`` regeneration.
        """
        self.config = config if config is not None else RingConfiguration()
        self._own_sampler = sampler is None
        self.sampler = sampler if sampler is not None else \
            FractalNoiseSampler.from_config(self.config)
        self.scene_host = scene_host if scene_host is not None else InMemorySceneHost()
        self.progress = progress
        self.texture_dir = pathlib.Path(texture_dir)
        self.playing = playing

        self.state = LifecycleState.idle
        self.plan = None
        self.factory = SegmentFactory(self.sampler)
        self.registry = SegmentRegistry(self.scene_host)
        self.proximity_state = ProximityState()
        self.scheduler = ProximityLODScheduler(
            self.registry, self.rebuild_segment, self.proximity_state)
        self._sync_scheduler()

        self.root = self.scene_host.create_placeholder("RingWorld")
        self._container = None
        self._pending_destroy: list = []

    # ── Configuration ─────────────────────────────────────────────────

    def _sync_scheduler(self) -> None:
        self.scheduler.proximity_threshold = self.config.proximity_threshold
        self.scheduler.target_lod = self.config.target_lod
        self.scheduler.interval = self.config.tick_interval

    def update_config(self, config: RingConfiguration) -> Optional[GenerationResult]:
        """Validate and adopt *config*.

        Regenerates when ``auto_update`` is set and the host is not in
        playback mode. Returns the generation result, if any.
        """
        self.config = planner.validate(config)
        self._sync_scheduler()
        if self.config.auto_update and not self.playing:
            return self.generate()
        return None

    def set_observer(self, observer) -> None:
        self.scheduler.observer = observer

    # ── Generation ────────────────────────────────────────────────────

    def _teardown(self) -> None:
        self.registry.clear()
        if self._container is not None:
            logger.info("Deleting previous segments...")
            self._pending_destroy.append(self._container)
            self._container = None

    def _new_container(self) -> None:
        container = self.scene_host.create_placeholder("Segments")
        self.scene_host.set_parent(container, self.root)
        self.scene_host.set_transform(container, position=(0.0, 0.0, 0.0),
                                      rotation=(0.0, 0.0, 0.0))
        self._container = container

    def rebuild_segment(self, index: int, lod: int) -> Segment:
        """Build segment *index* at *lod* and attach it to the scene.

        The caller stores it in the registry.
        """
        if self.plan is None:
            raise RingWorldError("generate() must run before segments can be built")

        segment = self.factory.create_segment(index, lod, self.config, self.plan)
        handle = self.scene_host.create_placeholder(segment.name)
        self.scene_host.set_parent(handle, self._container)
        segment.scene_handle = handle

        if self.config.save_texture_files:
            export_segment_texture(segment, self.config, self.plan,
                                   self.sampler, self.texture_dir)
        return segment

    def generate(self) -> GenerationResult:
        """Validate the configuration, tear down the previous ring and build
        every segment in range.

        Raises ``InvalidConfiguration`` before touching any state. A
        cancelled generation keeps the segments created so far.
        """
        if self.state is LifecycleState.generating:
            raise RingWorldError("Generation already in progress")

        self.config = planner.validate(self.config)
        self._sync_scheduler()
        ring_plan = planner.plan(self.config)

        self.state = LifecycleState.generating
        try:
            logger.info("Generating ring mesh...")
            delete_previous_texture_files(self.texture_dir)
            self._teardown()
            self.proximity_state.reset()

            self.plan = ring_plan
            if self._own_sampler:
                self.sampler = FractalNoiseSampler.from_config(self.config)
                self.factory.sampler = self.sampler
            self._new_container()

            indices = self.config.index_range()
            result = GenerationResult(total=len(indices))
            if not indices:
                logger.info("Segment index range is empty, nothing to create")

            for index in indices:
                segment = self.rebuild_segment(index, self.config.starting_lod)
                self.registry.put(index, segment)
                result.created.append(index)

                if self.progress is not None and \
                        self.progress.report(result.count, result.total) and \
                        result.count < result.total:
                    logger.info("Operation canceled by the user.")
                    result.cancelled = True
                    break

            logger.info(f"Created {result.count} of {result.total} segments "
                        f"({ring_plan.vertex_count} verts, "
                        f"{ring_plan.triangle_count} tris each)")
            return result
        finally:
            self.state = LifecycleState.idle

    # ── Playback ──────────────────────────────────────────────────────

    def start(self) -> Optional[GenerationResult]:
        """Enter playback: optionally generate, then start proximity ticks."""
        self.playing = True
        result = None
        if self.config.generate_on_play:
            result = self.generate()
        self.scheduler.start()
        return result

    def stop(self) -> None:
        self.playing = False
        self.scheduler.stop()

    def step(self, now: float) -> Optional[int]:
        """Advance one scheduling step.

        Destroys containers retired by the last generation, then runs the
        proximity scheduler. Returns the upgraded index, if any.
        """
        pending, self._pending_destroy = self._pending_destroy, []
        for handle in pending:
            self.scene_host.destroy(handle)
        return self.scheduler.update(now)

    # ── Export ────────────────────────────────────────────────────────

    def export_glb(self, output_path) -> str:
        """Write every live segment into one GLB. Returns the path."""
        if not len(self.registry):
            raise RingWorldError("No segments to export")

        output_path = pathlib.Path(output_path)
        if not output_path.is_absolute():
            output_path = OUTPUT_DIR / output_path
        output_path.parent.mkdir(parents=True, exist_ok=True)

        scene = trimesh.Scene()
        for segment in self.registry:
            scene.add_geometry(segment.geometry, geom_name=f"segment_{segment.name}")
        scene.export(str(output_path), file_type='glb')
        logger.info(f"GLB file generated successfully: {output_path}")
        return str(output_path)
