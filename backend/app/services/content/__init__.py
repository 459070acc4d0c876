"""Content pipeline — turns generated itinerary text into the final document.

Modules:
    links               Destination-aware URL builders (maps, hotels, activities...)
    days                Pads itineraries that have fewer day blocks than trip days
    linkify             Stage 1: semantic link tokens → real URLs
    images              Stage 2: image tokens → image-search URLs (or removal)
    sections            Typed section tree over rendered HTML
    widgets             Stage 3: commerce widget injection + dedup
    link_normalizer     Stage 4: new-tab maps, on-page anchors, partner ids, map preview
    generic_validator   Stage 5: generic placeholder detection (routes to fallback)
    pipeline            Composes the stages

Pipeline:
    ensure_day_sections → linkify_tokens → resolve_image_tokens → render_markdown
    → inject_widgets → normalize_links → detect_generic_content
"""
