"""Live point-by-point scoring.

Runs on the scoring device: a pure scoring state machine (``engine``),
device-local persistence with expiry (``persistence``), the session
controller that ties them together (``session``) and the submitters that
hand the final score to the server (``submit``).
"""
