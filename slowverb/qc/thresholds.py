"""
Default QC thresholds for rendered exports.
"""
QC_THRESHOLDS = {
    "clip_level": 1.0,          # samples beyond this are clamped by the encoder
    "max_clipped_samples": 0,
    "dc_max": 0.01,
}
