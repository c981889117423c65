"""
Core data layer.

This package contains:
- data_dir: cache root initialization (afrb_dir)
- fetcher: download-if-absent for questionnaires and codebooks
- survey_loader: read .sav questionnaires into labelled, typed tables
- location_loader: read the optional per-round location CSVs
- merger: left-join locations onto survey rows
- store: per-round Parquet build output, read_round and list_built_rounds
- builder: the build() pipeline tying the above together
- errors: exception hierarchy shared by all of the above
"""
