"""Tests for the parallel multi-camera capture benchmark."""

import time

import pytest

from zivid_samples.cameras import AsyncCamera
from zivid_samples.cameras.backends.camera_backend import CameraBackend
from zivid_samples.cameras.backends.zivid import MockZividBackend
from zivid_samples.cameras.core.models import Capture2DSettings, CaptureSettings
from zivid_samples.cameras.core.timing import Measured2DTimes, MeasuredTimes, average_times
from zivid_samples.core.exceptions import CameraCaptureError, CameraConfigurationError, CameraNotFoundError
from zivid_samples.samples.multi_camera import (
    SETTINGS_TEMPLATE_DIR,
    CameraStatistics,
    MultiCameraCaptureInParallel,
    MultiCameraResult,
    compute_statistics,
)


@pytest.fixture
def settings_files():
    return SETTINGS_TEMPLATE_DIR / "settingsSlow.yml", SETTINGS_TEMPLATE_DIR / "settings2D.yml"


def make_sample(settings_files, **kwargs):
    settings_path, settings_2d_path = settings_files
    kwargs.setdefault("backend", "MockZivid")
    kwargs.setdefault("frames", 3)
    kwargs.setdefault("warmup_rounds", 1)
    return MultiCameraCaptureInParallel(settings_path=settings_path, settings_2d_path=settings_2d_path, **kwargs)


class TestConfiguration:
    def test_defaults(self, reload_settings):
        sample = MultiCameraCaptureInParallel()
        assert sample.frames == 30
        assert sample.warmup_rounds == 5
        assert sample.settings_path.name == "settingsSlow.yml"
        assert sample.settings_2d_path.name == "settings2D.yml"

    @pytest.mark.parametrize("kwargs", [{"frames": 0}, {"warmup_rounds": -1}])
    def test_invalid_counts(self, kwargs):
        with pytest.raises(ValueError):
            MultiCameraCaptureInParallel(**kwargs)


class TestStatistics:
    def test_compute_statistics(self):
        times_3d = [
            [MeasuredTimes(capture=0.010, total=0.020), MeasuredTimes(capture=0.030, total=0.040)],
            [MeasuredTimes(capture=0.020, total=0.030), MeasuredTimes(capture=0.050, total=0.060)],
        ]
        times_2d = [
            [Measured2DTimes(capture=0.001, total=0.002), Measured2DTimes(capture=0.003, total=0.004)],
            [Measured2DTimes(capture=0.003, total=0.004), Measured2DTimes(capture=0.005, total=0.006)],
        ]
        statistics = compute_statistics(["A", "B"], times_2d, times_3d)

        assert [s.camera for s in statistics] == ["A", "B"]
        assert statistics[0].average_3d.capture == pytest.approx(0.015)
        assert statistics[1].average_3d.total == pytest.approx(0.050)
        assert statistics[0].average_2d.capture == pytest.approx(0.002)
        assert statistics[1].average_2d.total == pytest.approx(0.005)

    def test_no_rounds(self):
        with pytest.raises(ValueError):
            compute_statistics(["A"], [], [])

    def test_report_lines(self):
        stats = CameraStatistics(
            camera="2020C0DE",
            average_2d=Measured2DTimes(capture=0.0123456, image_rgba=0.001, total=0.0133456),
            average_3d=MeasuredTimes(capture=0.1, point_cloud=0.0001, process=0.2, copy=0.05, total=0.3501),
        )
        result = MultiCameraResult(cameras=["2020C0DE"], statistics=[stats, stats])

        assert stats.line_2d() == (
            "Average 2d capture time for camera 2020C0DE: 12.346 ms image time: 1.000 ms total time: 13.346 ms"
        )
        assert stats.line_3d() == (
            "Average capture time for camera 2020C0DE: 100.000 ms point cloud time: 0.100 ms"
            " processing time: 200.000 ms copy time: 50.000 ms total time: 350.100 ms"
        )
        report = result.report()
        assert report[:2] == [stats.line_2d()] * 2
        assert report[2:] == [stats.line_3d()] * 2

    def test_unmeasured_processing_is_not_reported(self):
        stats = CameraStatistics(
            camera="2020C0DE",
            average_2d=Measured2DTimes(),
            average_3d=MeasuredTimes(capture=0.1, copy=0.05, total=0.15),
            processing_measured=False,
        )
        assert " processing time: n/a copy time: 50.000 ms" in stats.line_3d()

    def test_processing_flags_per_camera(self):
        times_2d = [[Measured2DTimes(), Measured2DTimes()]]
        times_3d = [[MeasuredTimes(), MeasuredTimes()]]
        statistics = compute_statistics(["A", "B"], times_2d, times_3d, [True, False])
        assert [s.processing_measured for s in statistics] == [True, False]
        assert "processing time: 0.000 ms" in statistics[0].line_3d()
        assert "processing time: n/a" in statistics[1].line_3d()


class TestRun:
    @pytest.mark.asyncio
    async def test_run_on_all_cameras(self, mock_env, settings_files, caplog):
        result = await make_sample(settings_files).run()

        assert result.cameras == ["MOCK001", "MOCK002"]
        assert len(result.times_2d) == len(result.times_3d) == 3
        assert all(len(round_times) == 2 for round_times in result.times_2d + result.times_3d)
        assert len(result.statistics) == 2
        assert result.processing_measured == [True, True]
        assert all(stats.processing_measured for stats in result.statistics)

        for j, stats in enumerate(result.statistics):
            expected = average_times([round_times[j] for round_times in result.times_3d])
            assert stats.average_3d == expected

        assert len(result.report()) == 4
        for message in ("Finding cameras", "Number of cameras found: 2", "Warmup task", "Generating statistics"):
            assert message in caplog.text

    @pytest.mark.asyncio
    async def test_rounds_wait_for_the_slowest_camera(self, mock_env, settings_files, monkeypatch):
        calls = []

        def recorded(kind, blocking):
            def wrapper(self, sdk_settings):
                start = time.perf_counter()
                if self.serial_number == "MOCK002":
                    time.sleep(0.05)
                result = blocking(self, sdk_settings)
                calls.append((kind, self.serial_number, start, time.perf_counter()))
                return result

            return wrapper

        monkeypatch.setattr(
            MockZividBackend, "_capture_2d_timed_blocking", recorded("2d", CameraBackend._capture_2d_timed_blocking)
        )
        monkeypatch.setattr(
            MockZividBackend, "_capture_timed_blocking", recorded("3d", CameraBackend._capture_timed_blocking)
        )
        await make_sample(settings_files, frames=2, warmup_rounds=0).run()

        calls.sort(key=lambda call: call[2])
        phases = [calls[i : i + 2] for i in range(0, len(calls), 2)]
        assert [phase[0][0] for phase in phases] == ["2d", "3d", "2d", "3d"]
        for phase in phases:
            assert {call[0] for call in phase} == {phase[0][0]}
            assert sorted(call[1] for call in phase) == ["MOCK001", "MOCK002"]
        for previous, following in zip(phases, phases[1:]):
            assert max(call[3] for call in previous) <= min(call[2] for call in following)

    @pytest.mark.asyncio
    async def test_owned_cameras_are_closed(self, mock_env, settings_files, monkeypatch):
        opened = []
        original_open_all = AsyncCamera.open_all.__func__

        async def tracking_open_all(cls, backend=None, **kwargs):
            cameras = await original_open_all(cls, backend, **kwargs)
            opened.extend(cameras)
            return cameras

        monkeypatch.setattr(AsyncCamera, "open_all", classmethod(tracking_open_all))
        await make_sample(settings_files, frames=1, warmup_rounds=0).run()
        assert len(opened) == 2
        assert not any(camera.is_open for camera in opened)

    @pytest.mark.asyncio
    async def test_given_cameras_stay_open(self, mock_env, settings_files):
        camera = await AsyncCamera.open("MockZivid:MOCK001", capture_delay_s=0.0)
        try:
            result = await make_sample(settings_files, cameras=[camera], frames=2, warmup_rounds=2).run()
            assert result.cameras == ["MOCK001"]
            assert camera.is_open
            # 2 warmup rounds, then a 2D and a 3D capture per measurement round
            assert camera.backend.frame_count == 2 + 2 * 2
        finally:
            await camera.close()

    @pytest.mark.asyncio
    async def test_measure_uses_given_settings(self, mock_env):
        camera = await AsyncCamera.open("MockZivid:MOCK001", capture_delay_s=0.0)
        try:
            sample = MultiCameraCaptureInParallel(frames=2, warmup_rounds=0, cameras=[camera])
            result = await sample.measure([camera], CaptureSettings(), Capture2DSettings())
        finally:
            await camera.close()
        assert len(result.times_3d) == 2
        assert result.statistics == []

    @pytest.mark.asyncio
    async def test_capture_failure_propagates(self, mock_env, settings_files, monkeypatch):
        def broken_capture(self, sdk_settings_2d):
            raise CameraCaptureError(f"{self.name} lost connection")

        monkeypatch.setattr(MockZividBackend, "_capture_2d", broken_capture)
        with pytest.raises(CameraCaptureError, match="lost connection"):
            await make_sample(settings_files, warmup_rounds=0).run()

    @pytest.mark.asyncio
    async def test_missing_settings_file(self, mock_env, tmp_path, settings_files):
        sample = make_sample((tmp_path / "missing.yml", settings_files[1]))
        with pytest.raises(CameraConfigurationError, match="not found"):
            await sample.run()

    @pytest.mark.asyncio
    async def test_no_cameras(self, mock_env, settings_files):
        mock_env.setenv("ZIVID_SAMPLES_CAMERA__MOCK_CAMERA_COUNT", "0")
        with pytest.raises(CameraNotFoundError):
            await make_sample(settings_files).run()

