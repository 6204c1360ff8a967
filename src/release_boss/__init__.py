"""release-boss: release automation driven by conventional commits."""

# %%release-boss: __version__ = "{{version}}"%%
__version__ = "0.3.0"
