"""Case normalisation, validation and Notion property construction."""
