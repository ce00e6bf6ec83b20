"""PRoPHET DTN simulation with windowed per-neighbor instrumentation"""
