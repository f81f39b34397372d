"""dbmonitor: KubeBlocks database cluster status monitor."""

__version__ = "0.1.0"
