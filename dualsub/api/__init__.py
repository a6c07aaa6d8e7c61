# dualsub/api/__init__.py
# ========================
# HTTP Layer - DualSub (FastAPI)
#
#   POST /api/v1/transcribe     - upload → bilingual segments
#   POST /api/v1/export/{fmt}   - segments → SRT / TXT download
