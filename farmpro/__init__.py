"""FarmPro reporting service: report aggregation and PDF/CSV/JSON export."""
