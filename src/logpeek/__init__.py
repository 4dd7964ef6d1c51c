"""Line-addressable viewer for very large local or remote files."""
