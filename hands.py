import logging

import cv2

import mediapipe as mp

log = logging.getLogger(__name__)


class Hands:
    """
    MediaPipe hands wrapper.

    Returns:
      {"hands": [hand0, hand1, ...]}

    Each hand dict contains:
      - "landmarks": [(x,y,z)*21] normalized image coords (unflipped)
      - "handedness": "Left" / "Right" (MediaPipe's label)
    """

    def __init__(self, max_hands=2, det_conf=0.5, track_conf=0.5, model_complexity=1):
        self.max_hands = max_hands
        self.mp_hands = mp.solutions.hands
        self.hands = self.mp_hands.Hands(
            static_image_mode=False,
            max_num_hands=max_hands,
            model_complexity=model_complexity,
            min_detection_confidence=float(det_conf),
            min_tracking_confidence=float(track_conf),
        )

    def process(self, frame_bgr):
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)

        # Fixes NORM_RECT without IMAGE_DIMENSIONS warning
        self.hands._image_width, self.hands._image_height = frame_bgr.shape[1], frame_bgr.shape[0]  # type: ignore[attr-defined]

        res = self.hands.process(frame_rgb)

        if not res.multi_hand_landmarks:
            return None

        labels = []
        for cls in (res.multi_handedness or []):
            labels.append(cls.classification[0].label if cls.classification else None)

        out = {"hands": []}
        for i, hand_lms in enumerate(res.multi_hand_landmarks):
            pts = [(lm.x, lm.y, lm.z) for lm in hand_lms.landmark]
            out["hands"].append({
                "landmarks": pts,
                "handedness": labels[i] if i < len(labels) else None,
            })

        return out

    def close(self):
        if self.hands is not None:
            self.hands.close()
            self.hands = None
            log.debug("MediaPipe hands closed")
