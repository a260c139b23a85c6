DEFAULT_FFMPEG = "ffmpeg"

OUTPUT_EXTENSION = ".ogg"
VORBIS_CODEC = "libvorbis"
VORBIS_QUALITY = "5"

CONFIG_DIR = ".oggify"
CONFIG_FILE = "config.json"
CONFIG_HOME_ENV = "OGGIFY_HOME"
