from imagevault.main import handler
