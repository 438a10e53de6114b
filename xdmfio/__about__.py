__version__ = "0.2.0"
__original_author__ = "xdmfio developers"
__original_author_email__ = "xdmfio@users.noreply.github.com"
__website__ = "https://github.com/xdmfio/xdmfio"
__license__ = "License :: OSI Approved :: MIT License"
__status__ = "Development Status :: 4 - Beta"
