"""
Tests del detector DeepFace (con DeepFace simulado) y de la capacidad
asíncrona de detección.
"""

import asyncio
import threading
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from conftest import ScriptedDetector, asymmetric_frame
from moodmusic.core.catalogue.schema import Mood
from moodmusic.core.emotion import DeepFaceEmotionDetector, DetectorCapability, DetectorStatus
from moodmusic.core.errors import DetectionError, ModelInitError


def _analysis(label="happy", confidence=0.95):
    return [{
        'dominant_emotion': label,
        'emotion': {label: 90.0},
        'face_confidence': confidence,
    }]


@pytest.fixture
def fake_deepface():
    deepface = MagicMock()
    deepface.analyze.return_value = _analysis()
    with patch('moodmusic.core.emotion.deepface_detector._load_deepface', return_value=deepface):
        yield deepface


class TestDeepFaceEmotionDetector:

    def test_initialize_builds_model_once(self, fake_deepface):
        detector = DeepFaceEmotionDetector()
        detector.initialize()
        detector.initialize()

        fake_deepface.build_model.assert_called_once_with(model_name="Emotion", task="facial_attribute")
        assert detector.is_ready

    def test_initialize_failure_is_model_init_error(self, fake_deepface):
        fake_deepface.build_model.side_effect = OSError("sin pesos")
        detector = DeepFaceEmotionDetector()

        with pytest.raises(ModelInitError, match="sin pesos"):
            detector.initialize()
        assert not detector.is_ready

    def test_import_failure_is_model_init_error(self):
        with patch('moodmusic.core.emotion.deepface_detector._load_deepface',
                   side_effect=ImportError("No module named 'deepface'")):
            with pytest.raises(ModelInitError):
                DeepFaceEmotionDetector().initialize()

    def test_detect_before_initialize_fails_fast(self, fake_deepface):
        with pytest.raises(ModelInitError):
            DeepFaceEmotionDetector().detect(asymmetric_frame())
        fake_deepface.analyze.assert_not_called()

    def test_detect_returns_normalized_mood(self, fake_deepface):
        fake_deepface.analyze.return_value = _analysis("angry")
        detector = DeepFaceEmotionDetector(detector_backend='mtcnn')
        detector.initialize()

        assert detector.detect(asymmetric_frame()) is Mood.ANGER
        kwargs = fake_deepface.analyze.call_args.kwargs
        assert kwargs['actions'] == ['emotion']
        assert kwargs['enforce_detection'] is True
        assert kwargs['detector_backend'] == 'mtcnn'

    def test_first_face_wins(self, fake_deepface):
        fake_deepface.analyze.return_value = _analysis("sad") + _analysis("happy")
        detector = DeepFaceEmotionDetector()
        detector.initialize()

        assert detector.detect(asymmetric_frame()) is Mood.SADNESS

    def test_no_face_is_detection_error(self, fake_deepface):
        fake_deepface.analyze.side_effect = ValueError("Face could not be detected")
        detector = DeepFaceEmotionDetector()
        detector.initialize()

        with pytest.raises(DetectionError, match="rostro"):
            detector.detect(asymmetric_frame())

    def test_low_confidence_face_is_rejected(self, fake_deepface):
        fake_deepface.analyze.return_value = _analysis("happy", confidence=0.4)
        detector = DeepFaceEmotionDetector(confidence_threshold=0.9)
        detector.initialize()

        with pytest.raises(DetectionError):
            detector.detect(asymmetric_frame())

    def test_unreported_confidence_is_accepted(self, fake_deepface):
        fake_deepface.analyze.return_value = _analysis("neutral", confidence=0)
        detector = DeepFaceEmotionDetector()
        detector.initialize()

        assert detector.detect(asymmetric_frame()) is Mood.NEUTRAL

    def test_unknown_label_is_detection_error(self, fake_deepface):
        fake_deepface.analyze.return_value = _analysis("contempt")
        detector = DeepFaceEmotionDetector()
        detector.initialize()

        with pytest.raises(DetectionError, match="contempt"):
            detector.detect(asymmetric_frame())

    def test_inference_error_is_detection_error(self, fake_deepface):
        fake_deepface.analyze.side_effect = RuntimeError("tensor mismatch")
        detector = DeepFaceEmotionDetector()
        detector.initialize()

        with pytest.raises(DetectionError) as exc_info:
            detector.detect(asymmetric_frame())
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.parametrize("pixels", [
        None,
        np.zeros((0, 10, 3), dtype=np.uint8),
        np.zeros((4, 4, 3), dtype=np.float32),
        np.zeros((4, 4, 7), dtype=np.uint8),
        np.zeros(12, dtype=np.uint8),
    ])
    def test_malformed_images_are_rejected(self, fake_deepface, pixels):
        detector = DeepFaceEmotionDetector()
        detector.initialize()

        with pytest.raises(DetectionError, match="inválida"):
            detector.detect(pixels)
        fake_deepface.analyze.assert_not_called()


class TestDetectorCapability:

    @pytest.mark.asyncio
    async def test_initialize_twice_equals_once(self, capability, detector):
        await capability.initialize_detectors()
        await capability.initialize_detectors()

        assert detector.init_calls == 1
        assert capability.status is DetectorStatus.READY

    @pytest.mark.asyncio
    async def test_concurrent_initialize_loads_once(self, capability, detector):
        await asyncio.gather(
            capability.initialize_detectors(),
            capability.initialize_detectors(),
            capability.initialize_detectors(),
        )
        assert detector.init_calls == 1

    @pytest.mark.asyncio
    async def test_failure_is_reported_and_not_retried_automatically(self, metrics, broken_models):
        detector = ScriptedDetector(init_error=broken_models)
        capability = DetectorCapability(detector, metrics=metrics)

        with pytest.raises(ModelInitError):
            await capability.initialize_detectors()

        assert capability.status is DetectorStatus.FAILED
        assert capability.failure_reason == "pesos no encontrados"
        assert detector.init_calls == 1

    @pytest.mark.asyncio
    async def test_explicit_retry_after_failure(self, metrics, broken_models):
        detector = ScriptedDetector(init_error=broken_models)
        capability = DetectorCapability(detector, metrics=metrics)
        with pytest.raises(ModelInitError):
            await capability.initialize_detectors()

        detector.init_error = None
        await capability.initialize_detectors()

        assert capability.is_ready
        assert capability.failure_reason is None

    @pytest.mark.asyncio
    async def test_unexpected_init_exception_is_wrapped(self, metrics):
        detector = ScriptedDetector(init_error=MemoryError("sin memoria"))
        capability = DetectorCapability(detector, metrics=metrics)

        with pytest.raises(ModelInitError):
            await capability.initialize_detectors()
        assert capability.status is DetectorStatus.FAILED

    @pytest.mark.asyncio
    async def test_detect_before_initialize_is_rejected(self, capability, detector):
        with pytest.raises(ModelInitError):
            await capability.detect_emotion(asymmetric_frame())
        assert detector.images == []

    @pytest.mark.asyncio
    async def test_detect_after_failed_init_reports_reason(self, metrics, broken_models):
        capability = DetectorCapability(ScriptedDetector(init_error=broken_models), metrics=metrics)
        with pytest.raises(ModelInitError):
            await capability.initialize_detectors()

        with pytest.raises(ModelInitError, match="pesos no encontrados"):
            await capability.detect_emotion(asymmetric_frame())

    @pytest.mark.asyncio
    async def test_detect_returns_mood_and_records_latency(self, capability, metrics):
        await capability.initialize_detectors()

        mood = await capability.detect_emotion(asymmetric_frame())

        assert mood is Mood.HAPPINESS
        assert metrics.get_statistics('emotion_detection')['emotion_detection']['count'] == 1

    @pytest.mark.asyncio
    async def test_detection_errors_propagate_unchanged(self, metrics, no_face):
        capability = DetectorCapability(ScriptedDetector([no_face]), metrics=metrics)
        await capability.initialize_detectors()

        with pytest.raises(DetectionError) as exc_info:
            await capability.detect_emotion(asymmetric_frame())
        assert exc_info.value is no_face

    @pytest.mark.asyncio
    async def test_unexpected_detection_exception_is_wrapped(self, metrics):
        capability = DetectorCapability(ScriptedDetector([KeyError("emotion")]), metrics=metrics)
        await capability.initialize_detectors()

        with pytest.raises(DetectionError):
            await capability.detect_emotion(asymmetric_frame())

    @pytest.mark.asyncio
    async def test_status_is_loading_while_models_load(self, capability, detector):
        detector.init_gate = threading.Event()
        task = asyncio.create_task(capability.initialize_detectors())

        for _ in range(100):
            if capability.status is DetectorStatus.LOADING:
                break
            await asyncio.sleep(0.01)
        assert capability.status is DetectorStatus.LOADING

        detector.init_gate.set()
        await task
        assert capability.is_ready
