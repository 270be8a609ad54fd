"""
photon_noise.utils
------------------
Plotting helpers for inspecting generated profiles.
"""
