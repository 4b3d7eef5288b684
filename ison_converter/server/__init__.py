"""HTTP API for ISON conversions (FastAPI app in ``app.py``)."""
